"""Tests for auth exceptions."""

import pytest

from uberauth.exceptions import (
    OAuthCallbackError,
    OAuthError,
    UberAuthError,
    UberAuthErrorKind,
    UberError,
)


class TestUberAuthError:
    """Test UberAuthError construction and comparison."""

    def test_inherits_from_uber_error(self):
        """UberAuthError is an UberError."""
        assert isinstance(UberAuthError.cancelled(), UberError)

    def test_oauth_callback_error_inherits_from_uber_error(self):
        assert isinstance(OAuthCallbackError("timeout"), UberError)

    @pytest.mark.parametrize(
        ("error", "kind"),
        [
            (UberAuthError.existing_auth_session(), UberAuthErrorKind.EXISTING_AUTH_SESSION),
            (UberAuthError.invalid_request(), UberAuthErrorKind.INVALID_REQUEST),
            (UberAuthError.invalid_response(), UberAuthErrorKind.INVALID_RESPONSE),
            (UberAuthError.invalid_auth_code(), UberAuthErrorKind.INVALID_AUTH_CODE),
            (UberAuthError.oauth(OAuthError.ACCESS_DENIED), UberAuthErrorKind.OAUTH),
            (UberAuthError.cancelled(), UberAuthErrorKind.CANCELLED),
            (UberAuthError.network_error(OSError("down")), UberAuthErrorKind.NETWORK_ERROR),
            (UberAuthError.service_error(503), UberAuthErrorKind.SERVICE_ERROR),
        ],
    )
    def test_constructors_set_kind(self, error, kind):
        assert error.kind == kind

    def test_equal_by_kind(self):
        assert UberAuthError.cancelled() == UberAuthError.cancelled()
        assert UberAuthError.cancelled() != UberAuthError.invalid_response()

    def test_equal_by_oauth_error(self):
        assert UberAuthError.oauth(OAuthError.ACCESS_DENIED) == UberAuthError.oauth(
            OAuthError.ACCESS_DENIED
        )
        assert UberAuthError.oauth(OAuthError.ACCESS_DENIED) != UberAuthError.oauth(
            OAuthError.SERVER_ERROR
        )

    def test_equal_by_status_code(self):
        assert UberAuthError.service_error(500) == UberAuthError.service_error(500)
        assert UberAuthError.service_error(500) != UberAuthError.service_error(502)

    def test_network_error_ignores_underlying(self):
        """Network errors compare by kind only."""
        assert UberAuthError.network_error(OSError("a")) == UberAuthError.network_error(
            ValueError("b")
        )

    def test_hashable(self):
        errors = {UberAuthError.cancelled(), UberAuthError.cancelled()}
        assert len(errors) == 1

    def test_network_error_keeps_underlying(self):
        cause = OSError("connection refused")
        error = UberAuthError.network_error(cause)
        assert error.underlying is cause
        assert "connection refused" in str(error)

    def test_oauth_message_names_code(self):
        assert "access_denied" in str(UberAuthError.oauth(OAuthError.ACCESS_DENIED))

    def test_service_error_message_names_status(self):
        error = UberAuthError.service_error(401, OAuthError.UNAUTHORIZED_CLIENT)
        assert error.status_code == 401
        assert error.oauth_error == OAuthError.UNAUTHORIZED_CLIENT
        assert "HTTP 401" in str(error)

    def test_repr(self):
        assert repr(UberAuthError.cancelled()) == "UberAuthError(cancelled)"
        assert (
            repr(UberAuthError.oauth(OAuthError.INVALID_SCOPE))
            == "UberAuthError(oauth, invalid_scope)"
        )

    def test_can_be_raised(self):
        with pytest.raises(UberAuthError) as exc_info:
            raise UberAuthError.invalid_request("missing client_id")
        assert "missing client_id" in str(exc_info.value)


class TestOAuthError:
    """Test OAuthError codes."""

    def test_codes(self):
        assert {error.value for error in OAuthError} == {
            "invalid_request",
            "unauthorized_client",
            "access_denied",
            "unsupported_response_type",
            "invalid_scope",
            "server_error",
            "temporarily_unavailable",
        }

    def test_unknown_code_rejected(self):
        with pytest.raises(ValueError):
            OAuthError("made_up")
