"""Shared test doubles for the authorization code provider's collaborators."""

from collections.abc import Callable

import pytest

from uberauth.auth.interfaces import SessionCompletion
from uberauth.auth.models import AuthorizationCodeConfig, UberApp
from uberauth.auth.provider import AuthorizationCodeAuthProvider
from uberauth.auth.result import Result
from uberauth.exceptions import UberAuthError


class ConfigurationProviderMock:
    """Fixed client registration; installed apps decided by a handler."""

    def __init__(
        self,
        client_id: str = "test_client_id",
        redirect_uri: str = "test://app",
        sdk_version: str = "1.0.0",
        auth_host: str = "https://auth.uber.com",
        is_installed_handler: Callable[[UberApp], bool] | None = None,
    ):
        self.client_id = client_id
        self.redirect_uri = redirect_uri
        self.sdk_version = sdk_version
        self.auth_host = auth_host
        self.is_installed_handler = is_installed_handler
        self.is_installed_calls: list[UberApp] = []

    def is_installed(self, app: UberApp, default_if_unregistered: bool) -> bool:
        self.is_installed_calls.append(app)
        if self.is_installed_handler is None:
            return False
        return self.is_installed_handler(app)


class ApplicationLauncherMock:
    """Records launched URLs and reports them as handled or not."""

    def __init__(self, handled: bool = True):
        self.handled = handled
        self.launched: list[str] = []

    async def launch(self, url: str) -> bool:
        self.launched.append(url)
        return self.handled


class NetworkProviderMock:
    """Answers each request type with a canned value or raises a canned error."""

    def __init__(self, responses: dict | None = None):
        self.responses = dict(responses or {})
        self.requests: list = []

    async def execute(self, request):
        self.requests.append(request)
        response = self.responses.get(type(request))
        if isinstance(response, BaseException):
            raise response
        if response is None:
            raise UberAuthError.network_error(RuntimeError(f"Unexpected {type(request).__name__}"))
        return response


class AuthenticationSessionMock:
    """Browser session that only reports when the test tells it to."""

    def __init__(self, url: str, redirect_uri: str, completion: SessionCompletion):
        self.url = url
        self.redirect_uri = redirect_uri
        self.completion = completion
        self.start_count = 0
        self.cancel_count = 0

    async def start(self) -> None:
        self.start_count += 1

    def cancel(self) -> None:
        self.cancel_count += 1

    async def complete(self, result: Result) -> None:
        await self.completion(result)


class SessionBuilderMock:
    """SessionBuilder that keeps every session it builds."""

    def __init__(self):
        self.sessions: list[AuthenticationSessionMock] = []

    def __call__(
        self, url: str, redirect_uri: str, completion: SessionCompletion
    ) -> AuthenticationSessionMock:
        session = AuthenticationSessionMock(url, redirect_uri, completion)
        self.sessions.append(session)
        return session


class CompletionRecorder:
    """Completion that records every result it receives."""

    def __init__(self):
        self.results: list[Result] = []

    def __call__(self, result: Result) -> None:
        self.results.append(result)


@pytest.fixture
def configuration() -> ConfigurationProviderMock:
    return ConfigurationProviderMock()


@pytest.fixture
def launcher() -> ApplicationLauncherMock:
    return ApplicationLauncherMock()


@pytest.fixture
def network() -> NetworkProviderMock:
    return NetworkProviderMock()


@pytest.fixture
def session_builder() -> SessionBuilderMock:
    return SessionBuilderMock()


@pytest.fixture
def completion() -> CompletionRecorder:
    return CompletionRecorder()


@pytest.fixture
def make_provider(configuration, launcher, network, session_builder):
    """Build a provider wired to the shared test doubles."""

    def _make(config: AuthorizationCodeConfig | None = None) -> AuthorizationCodeAuthProvider:
        return AuthorizationCodeAuthProvider.from_config(
            config or AuthorizationCodeConfig(),
            session_builder=session_builder,
            configuration_provider=configuration,
            application_launcher=launcher,
            network_provider=network,
        )

    return _make
