"""Validation and parsing of authorization callback URLs."""

import logging
from urllib.parse import SplitResult, parse_qs, urlsplit

from uberauth.auth.models import Client
from uberauth.auth.result import Failure, Result, Success
from uberauth.exceptions import OAuthError, UberAuthError

logger = logging.getLogger(__name__)


def _host(parts: SplitResult) -> str:
    """Host component without userinfo or port, case preserved."""
    host = parts.netloc.rpartition("@")[2]
    if host.startswith("["):
        return host[: host.find("]") + 1]
    return host.partition(":")[0]


class AuthorizationCodeResponseParser:
    """Checks that a URL is our redirect and extracts the code or error from it."""

    def is_valid_response(self, url: str, matching: str) -> bool:
        """Check whether ``url`` targets the redirect URI ``matching``.

        Schemes compare case-insensitively, hosts exactly. Anything without a
        scheme or host on either side is rejected.
        """
        try:
            candidate = urlsplit(url)
            expected = urlsplit(matching)
        except ValueError:
            return False

        candidate_host = _host(candidate)
        expected_host = _host(expected)
        if not (candidate.scheme and expected.scheme and candidate_host and expected_host):
            return False

        return (
            candidate.scheme.lower() == expected.scheme.lower()
            and candidate_host == expected_host
        )

    def __call__(self, url: str) -> Result:
        """Extract a Client carrying the authorization code, or the OAuth failure.

        Returns:
            Success(Client) when a ``code`` parameter is present, otherwise a
            Failure classified from the ``error`` parameter.
        """
        try:
            parts = urlsplit(url)
            query = parse_qs(parts.query)
        except ValueError:
            return Failure(UberAuthError.invalid_response())

        if not parts.scheme:
            return Failure(UberAuthError.invalid_response())

        if "error" in query:
            error = query["error"][0]
            description = query.get("error_description", [""])[0]
            logger.debug("Authorization callback returned error %s %s", error, description)
            try:
                return Failure(UberAuthError.oauth(OAuthError(error)))
            except ValueError:
                return Failure(UberAuthError.invalid_auth_code())

        if "code" in query:
            return Success(Client(authorization_code=query["code"][0]))

        return Failure(UberAuthError.invalid_response())
