"""Exception hierarchy for uberauth."""

from enum import StrEnum


class UberError(Exception):
    """Base exception for all uberauth errors."""


class OAuthError(StrEnum):
    """OAuth 2.0 error codes an authorization server may return (RFC 6749 4.1.2.1)."""

    INVALID_REQUEST = "invalid_request"
    UNAUTHORIZED_CLIENT = "unauthorized_client"
    ACCESS_DENIED = "access_denied"
    UNSUPPORTED_RESPONSE_TYPE = "unsupported_response_type"
    INVALID_SCOPE = "invalid_scope"
    SERVER_ERROR = "server_error"
    TEMPORARILY_UNAVAILABLE = "temporarily_unavailable"


class UberAuthErrorKind(StrEnum):
    """Every way a login attempt can fail."""

    EXISTING_AUTH_SESSION = "existing_auth_session"
    INVALID_REQUEST = "invalid_request"
    INVALID_RESPONSE = "invalid_response"
    INVALID_AUTH_CODE = "invalid_auth_code"
    OAUTH = "oauth"
    CANCELLED = "cancelled"
    NETWORK_ERROR = "network_error"
    SERVICE_ERROR = "service_error"


_MESSAGES = {
    UberAuthErrorKind.EXISTING_AUTH_SESSION: "An authentication attempt is already in progress",
    UberAuthErrorKind.INVALID_REQUEST: "Client ID or redirect URI is missing or malformed",
    UberAuthErrorKind.INVALID_RESPONSE: "Callback URL carried neither a code nor a recognized error",
    UberAuthErrorKind.INVALID_AUTH_CODE: "Callback URL carried an unrecognized error",
    UberAuthErrorKind.OAUTH: "Authorization server returned an OAuth error",
    UberAuthErrorKind.CANCELLED: "Authentication was cancelled",
    UberAuthErrorKind.NETWORK_ERROR: "Network request failed",
    UberAuthErrorKind.SERVICE_ERROR: "Authorization server rejected the request",
}


class UberAuthError(UberError):
    """A login attempt failure.

    The set of kinds is closed; build instances with the classmethods rather
    than subclassing. Two errors compare equal when their kind and payload
    code match, so tests and callers can compare against e.g.
    ``UberAuthError.oauth(OAuthError.ACCESS_DENIED)``.
    """

    def __init__(
        self,
        kind: UberAuthErrorKind,
        *,
        oauth_error: OAuthError | None = None,
        underlying: BaseException | None = None,
        status_code: int | None = None,
        detail: str | None = None,
    ) -> None:
        self.kind = kind
        self.oauth_error = oauth_error
        self.underlying = underlying
        self.status_code = status_code
        message = _MESSAGES[kind]
        if oauth_error is not None:
            message = f"{message}: {oauth_error.value}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)

    @classmethod
    def existing_auth_session(cls) -> "UberAuthError":
        return cls(UberAuthErrorKind.EXISTING_AUTH_SESSION)

    @classmethod
    def invalid_request(cls, detail: str | None = None) -> "UberAuthError":
        return cls(UberAuthErrorKind.INVALID_REQUEST, detail=detail)

    @classmethod
    def invalid_response(cls) -> "UberAuthError":
        return cls(UberAuthErrorKind.INVALID_RESPONSE)

    @classmethod
    def invalid_auth_code(cls) -> "UberAuthError":
        return cls(UberAuthErrorKind.INVALID_AUTH_CODE)

    @classmethod
    def oauth(cls, error: OAuthError) -> "UberAuthError":
        return cls(UberAuthErrorKind.OAUTH, oauth_error=error)

    @classmethod
    def cancelled(cls) -> "UberAuthError":
        return cls(UberAuthErrorKind.CANCELLED)

    @classmethod
    def network_error(cls, underlying: BaseException) -> "UberAuthError":
        return cls(UberAuthErrorKind.NETWORK_ERROR, underlying=underlying, detail=str(underlying))

    @classmethod
    def service_error(
        cls, status_code: int, oauth_error: OAuthError | None = None
    ) -> "UberAuthError":
        return cls(
            UberAuthErrorKind.SERVICE_ERROR,
            oauth_error=oauth_error,
            status_code=status_code,
            detail=f"HTTP {status_code}",
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UberAuthError):
            return NotImplemented
        return (
            self.kind == other.kind
            and self.oauth_error == other.oauth_error
            and self.status_code == other.status_code
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.oauth_error, self.status_code))

    def __repr__(self) -> str:
        if self.oauth_error is not None:
            return f"UberAuthError({self.kind.value}, {self.oauth_error.value})"
        return f"UberAuthError({self.kind.value})"


class OAuthCallbackError(UberError):
    """Loopback callback server failed to start or was aborted."""
