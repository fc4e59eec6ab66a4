"""httpx-backed network provider for PAR and token requests."""

import logging

import httpx
from pydantic import ValidationError

from uberauth.auth.interfaces import NetworkRequest, ResponseT
from uberauth.exceptions import OAuthError, UberAuthError
from uberauth.settings import get_settings

logger = logging.getLogger(__name__)


def _oauth_error(response: httpx.Response) -> OAuthError | None:
    """OAuth error code named in an error response body, if any."""
    try:
        error = response.json().get("error")
        return OAuthError(error)
    except (ValueError, AttributeError):
        return None


class HttpxNetworkProvider:
    """Sends form-encoded requests to the authorization server.

    Transport failures surface as ``network_error``; non-2xx responses as
    ``service_error`` with the OAuth error code when the body carries one.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        settings = get_settings()
        self._base_url = (base_url or settings.auth_host).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.http_timeout
        self._client = client

    async def execute(self, request: NetworkRequest[ResponseT]) -> ResponseT:
        url = f"{self._base_url}{request.path}"
        logger.debug("%s %s", request.method, url)

        try:
            if self._client is not None:
                response = await self._send(self._client, request, url)
            else:
                async with httpx.AsyncClient() as client:
                    response = await self._send(client, request, url)
        except httpx.HTTPError as e:
            logger.warning("Request to %s failed: %s", url, e)
            raise UberAuthError.network_error(e) from e

        if response.is_error:
            logger.warning("Request to %s returned HTTP %d", url, response.status_code)
            raise UberAuthError.service_error(response.status_code, _oauth_error(response))

        try:
            return request.decode(response.json())
        except (ValueError, ValidationError) as e:
            logger.warning("Malformed response from %s: %s", url, e)
            raise UberAuthError.network_error(e) from e

    async def _send(
        self, client: httpx.AsyncClient, request: NetworkRequest[ResponseT], url: str
    ) -> httpx.Response:
        return await client.request(
            request.method,
            url,
            data=request.body,
            headers={"Accept": "application/json"},
            timeout=self._timeout,
        )
