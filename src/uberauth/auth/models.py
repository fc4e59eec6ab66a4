"""Authentication data models."""

from dataclasses import dataclass, field
from enum import Flag, StrEnum, auto

from pydantic import BaseModel, ConfigDict, Field, field_validator


class UberApp(StrEnum):
    """Companion apps that can complete a login on the user's behalf."""

    EATS = "eats"
    DRIVER = "driver"
    RIDES = "rides"

    @property
    def deeplink_scheme(self) -> str:
        """URL scheme the app registers with the OS."""
        return _DEEPLINK_SCHEMES[self]

    @property
    def url_identifier(self) -> str:
        """Path segment of the app-specific authorize endpoint."""
        return _URL_IDENTIFIERS[self]


_DEEPLINK_SCHEMES = {
    UberApp.EATS: "ubereats",
    UberApp.DRIVER: "uberdriver",
    UberApp.RIDES: "uber",
}

_URL_IDENTIFIERS = {
    UberApp.EATS: "eats",
    UberApp.DRIVER: "drivers",
    UberApp.RIDES: "riders",
}


class Prompt(Flag):
    """Hints asking the server to force re-authentication or re-consent."""

    LOGIN = auto()
    CONSENT = auto()

    @property
    def string_value(self) -> str:
        """Space-joined member names in declaration order, e.g. ``"login consent"``."""
        return " ".join(member.name.lower() for member in Prompt if member in self)


@dataclass(frozen=True)
class InApp:
    """Log in through a browser session owned by this process."""


@dataclass(frozen=True)
class Native:
    """Hand the login off to the first installed app in ``app_priority``."""

    app_priority: tuple[UberApp, ...] = tuple(UberApp)

    def __post_init__(self) -> None:
        object.__setattr__(self, "app_priority", tuple(self.app_priority))


AuthDestination = InApp | Native


class Prefill(BaseModel):
    """User details pre-registered with the server through a PAR request."""

    model_config = ConfigDict(frozen=True)

    email: str | None = None
    phone_number: str | None = None
    first_name: str | None = None
    last_name: str | None = None


@dataclass(frozen=True)
class AuthorizationCodeConfig:
    """Per-login options for the authorization code provider."""

    prompt: Prompt = Prompt(0)
    should_exchange_auth_code: bool = False
    scopes: tuple[str, ...] = ("profile",)


@dataclass(frozen=True)
class AuthContext:
    """Everything needed to start one login attempt."""

    destination: AuthDestination = field(default_factory=InApp)
    config: AuthorizationCodeConfig = field(default_factory=AuthorizationCodeConfig)
    prefill: Prefill | None = None


class Par(BaseModel):
    """Pushed authorization request response."""

    request_uri: str | None = None
    expires_in: int = 0


class AccessToken(BaseModel):
    """OAuth access token as returned by the token endpoint."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    token_string: str = Field(alias="access_token")
    token_type: str
    refresh_token: str | None = None
    expires_in: int | None = None
    scope: list[str] | None = None

    @field_validator("scope", mode="before")
    @classmethod
    def _split_scope(cls, value: object) -> object:
        if isinstance(value, str):
            return value.split()
        return value


class Client(BaseModel):
    """Outcome of a successful login.

    Carries only ``authorization_code`` when the code was not exchanged, and
    only the token fields when it was.
    """

    model_config = ConfigDict(frozen=True)

    authorization_code: str | None = None
    access_token: str | None = None
    refresh_token: str | None = None
    token_type: str | None = None
    expires_in: int | None = None
    scope: list[str] | None = None

    @classmethod
    def from_access_token(cls, token: AccessToken) -> "Client":
        """Build the client delivered after a successful code exchange."""
        return cls(
            access_token=token.token_string,
            refresh_token=token.refresh_token,
            token_type=token.token_type,
            expires_in=token.expires_in,
            scope=token.scope,
        )
