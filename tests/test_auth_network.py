"""Tests for HttpxNetworkProvider."""

from urllib.parse import parse_qs

import httpx
import pytest

from uberauth.auth.models import AccessToken, Par, Prefill
from uberauth.auth.network import HttpxNetworkProvider
from uberauth.auth.requests import ParRequest, TokenRequest
from uberauth.exceptions import OAuthError, UberAuthError, UberAuthErrorKind

TOKEN_REQUEST = TokenRequest(
    client_id="client", redirect_uri="myapp://cb", code="abc", code_verifier="verifier"
)


def _provider(handler) -> HttpxNetworkProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpxNetworkProvider(base_url="https://auth.example.com/", client=client)


class TestExecute:
    """Test HttpxNetworkProvider.execute."""

    @pytest.mark.asyncio
    async def test_token_request(self):
        """Token requests are form-posted and decoded into an AccessToken."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "access_token": "tok",
                    "token_type": "Bearer",
                    "expires_in": 3600,
                    "scope": "profile history",
                },
            )

        token = await _provider(handler).execute(TOKEN_REQUEST)

        assert token == AccessToken(
            token_string="tok", token_type="Bearer", expires_in=3600, scope=["profile", "history"]
        )
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == "https://auth.example.com/oauth/v2/token"
        assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
        form = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
        assert form == TOKEN_REQUEST.body

    @pytest.mark.asyncio
    async def test_par_request(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/oauth/v2/par"
            return httpx.Response(201, json={"request_uri": "urn:par:1", "expires_in": 60})

        par = await _provider(handler).execute(
            ParRequest(
                client_id="client", redirect_uri="myapp://cb", prefill=Prefill(email="a@b.com")
            )
        )

        assert par == Par(request_uri="urn:par:1", expires_in=60)

    @pytest.mark.asyncio
    async def test_error_response_with_oauth_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"error": "invalid_request"})

        with pytest.raises(UberAuthError) as exc_info:
            await _provider(handler).execute(TOKEN_REQUEST)

        assert exc_info.value == UberAuthError.service_error(400, OAuthError.INVALID_REQUEST)

    @pytest.mark.asyncio
    async def test_error_response_without_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, text="Service Unavailable")

        with pytest.raises(UberAuthError) as exc_info:
            await _provider(handler).execute(TOKEN_REQUEST)

        assert exc_info.value == UberAuthError.service_error(503)

    @pytest.mark.asyncio
    async def test_error_response_with_unknown_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"error": "invalid_grant"})

        with pytest.raises(UberAuthError) as exc_info:
            await _provider(handler).execute(TOKEN_REQUEST)

        assert exc_info.value == UberAuthError.service_error(400)

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(UberAuthError) as exc_info:
            await _provider(handler).execute(TOKEN_REQUEST)

        assert exc_info.value.kind == UberAuthErrorKind.NETWORK_ERROR
        assert isinstance(exc_info.value.underlying, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_malformed_body(self):
        """A success response that does not decode is a network error."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"unexpected": True})

        with pytest.raises(UberAuthError) as exc_info:
            await _provider(handler).execute(TOKEN_REQUEST)

        assert exc_info.value.kind == UberAuthErrorKind.NETWORK_ERROR

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html></html>")

        with pytest.raises(UberAuthError) as exc_info:
            await _provider(handler).execute(TOKEN_REQUEST)

        assert exc_info.value.kind == UberAuthErrorKind.NETWORK_ERROR
