"""Protocol types for the authorization code provider's collaborators.

Each collaborator is injected at construction time so tests can substitute
doubles for the OS, the browser, and the network.
"""

from collections.abc import Awaitable, Callable
from typing import Any, Protocol, TypeVar, runtime_checkable

from uberauth.auth.models import UberApp
from uberauth.auth.result import Result

ResponseT = TypeVar("ResponseT", covariant=True)


@runtime_checkable
class ConfigurationProviding(Protocol):
    """Source of client registration details and installed-app checks."""

    @property
    def client_id(self) -> str: ...

    @property
    def redirect_uri(self) -> str: ...

    @property
    def sdk_version(self) -> str: ...

    @property
    def auth_host(self) -> str: ...

    def is_installed(self, app: UberApp, default_if_unregistered: bool) -> bool: ...


@runtime_checkable
class ApplicationLaunching(Protocol):
    """Opens a URL with whatever the OS has registered for it."""

    async def launch(self, url: str) -> bool:
        """Return True when something accepted the URL."""
        ...


class NetworkRequest(Protocol[ResponseT]):
    """A typed request/response pair against the authorization server."""

    method: str
    path: str

    @property
    def body(self) -> dict[str, str]: ...

    def decode(self, data: dict[str, Any]) -> ResponseT: ...


@runtime_checkable
class NetworkProviding(Protocol):
    """Executes requests; raises UberAuthError on any failure."""

    async def execute(self, request: NetworkRequest[ResponseT]) -> ResponseT: ...


@runtime_checkable
class AuthenticationSession(Protocol):
    """An interactive browser login that reports its redirect asynchronously."""

    async def start(self) -> None: ...

    def cancel(self) -> None: ...


# Receives Success(callback_url) or Failure(error), exactly once
SessionCompletion = Callable[[Result], Awaitable[None]]

# (authorize_url, redirect_uri, completion) -> session
SessionBuilder = Callable[[str, str, SessionCompletion], AuthenticationSession]
