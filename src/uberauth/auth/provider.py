"""Authorization code + PKCE login orchestration.

AuthorizationCodeAuthProvider runs one login attempt at a time:

1. Reject the call if an attempt is already in flight, or if the client ID or
   redirect URI is unusable.
2. Generate a PKCE pair when the code will be exchanged for a token.
3. Push prefill data to the server (PAR) and reference it from the authorize URL.
4. Route the authorize URL to the first installed companion app, falling back
   to a browser session owned by this provider.
5. Validate and parse the redirect handed to ``handle``, exchange the code if
   requested, and deliver the outcome to the completion exactly once.

The attempt slot is claimed and cleared without an intervening ``await``, so
on a single event loop the in-flight check cannot race a second ``execute``.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace
from urllib.parse import urlsplit

from uberauth.auth.configuration import DefaultConfigurationProvider
from uberauth.auth.interfaces import (
    ApplicationLaunching,
    AuthenticationSession,
    ConfigurationProviding,
    NetworkProviding,
    SessionBuilder,
)
from uberauth.auth.launcher import BrowserApplicationLauncher
from uberauth.auth.models import (
    AuthDestination,
    AuthorizationCodeConfig,
    Client,
    Native,
    Prefill,
    Prompt,
    UberApp,
)
from uberauth.auth.network import HttpxNetworkProvider
from uberauth.auth.parser import AuthorizationCodeResponseParser
from uberauth.auth.pkce import PKCEPair, generate_pkce
from uberauth.auth.requests import AuthorizeRequest, ParRequest, TokenRequest
from uberauth.auth.result import Completion, Failure, Result, Success
from uberauth.auth.session import loopback_session_builder
from uberauth.exceptions import UberAuthError

logger = logging.getLogger(__name__)


@dataclass
class _Attempt:
    """State owned by the provider for one in-flight login."""

    completion: Completion
    pkce: PKCEPair | None
    session: AuthenticationSession | None = None
    callback_received: bool = False


def _is_valid_configuration(client_id: str, redirect_uri: str) -> bool:
    if not client_id or not redirect_uri:
        return False
    parts = urlsplit(redirect_uri)
    return bool(parts.scheme and parts.hostname)


class AuthorizationCodeAuthProvider:
    """Logs a user in with the OAuth 2.0 authorization code grant."""

    def __init__(
        self,
        session_builder: SessionBuilder | None = None,
        prompt: Prompt = Prompt(0),
        should_exchange_auth_code: bool = False,
        scopes: Sequence[str] = ("profile",),
        configuration_provider: ConfigurationProviding | None = None,
        application_launcher: ApplicationLaunching | None = None,
        response_parser: AuthorizationCodeResponseParser | None = None,
        network_provider: NetworkProviding | None = None,
    ):
        self.session_builder = session_builder or loopback_session_builder
        self.prompt = prompt
        self.should_exchange_auth_code = should_exchange_auth_code
        self.scopes = tuple(scopes)
        self.configuration_provider = configuration_provider or DefaultConfigurationProvider()
        self.application_launcher = application_launcher or BrowserApplicationLauncher()
        self.response_parser = response_parser or AuthorizationCodeResponseParser()
        self.network_provider = network_provider or HttpxNetworkProvider(
            base_url=self.configuration_provider.auth_host
        )
        self._attempt: _Attempt | None = None

    @classmethod
    def from_config(
        cls, config: AuthorizationCodeConfig, **collaborators
    ) -> "AuthorizationCodeAuthProvider":
        """Build a provider for ``config`` with optional collaborator overrides."""
        return cls(
            prompt=config.prompt,
            should_exchange_auth_code=config.should_exchange_auth_code,
            scopes=config.scopes,
            **collaborators,
        )

    @property
    def is_in_flight(self) -> bool:
        """True while an attempt awaits its outcome."""
        return self._attempt is not None

    @property
    def current_session(self) -> AuthenticationSession | None:
        """Browser session of the in-flight attempt, if it routed in-app."""
        return self._attempt.session if self._attempt else None

    async def execute(
        self,
        destination: AuthDestination,
        prefill: Prefill | None = None,
        *,
        completion: Completion,
    ) -> None:
        """Start a login attempt.

        Returns once the authorize URL has been handed to an app or a browser
        session. The outcome is delivered later through ``completion``, or
        immediately when the attempt is rejected or fails before routing.

        Args:
            destination: InApp, or Native with the apps to try in order.
            prefill: User details to register with the server via PAR.
            completion: Receives Success(Client) or Failure(UberAuthError) once.
        """
        if self._attempt is not None:
            logger.warning("Login requested while another attempt is in flight")
            completion(Failure(UberAuthError.existing_auth_session()))
            return

        client_id = self.configuration_provider.client_id
        redirect_uri = self.configuration_provider.redirect_uri
        if not _is_valid_configuration(client_id, redirect_uri):
            logger.error(
                "Invalid client configuration (client_id=%r, redirect_uri=%r)", client_id, redirect_uri
            )
            completion(Failure(UberAuthError.invalid_request()))
            return

        pkce = generate_pkce() if self.should_exchange_auth_code else None
        attempt = _Attempt(completion=completion, pkce=pkce)
        self._attempt = attempt

        try:
            await self._route(attempt, destination, prefill)
        except UberAuthError as e:
            logger.warning("Login attempt failed: %s", e)
            self._finish(attempt, Failure(e))
        except Exception as e:
            logger.exception("Login attempt failed unexpectedly")
            self._finish(attempt, Failure(UberAuthError.network_error(e)))

    async def handle(self, url: str) -> bool:
        """Consume a redirect for the in-flight attempt.

        Returns:
            False if no attempt is waiting or ``url`` is not our redirect URI,
            leaving any attempt untouched. True once the redirect has been
            consumed, whether it carried a code or an error.
        """
        attempt = self._attempt
        if attempt is None or attempt.callback_received:
            return False

        redirect_uri = self.configuration_provider.redirect_uri
        if not self.response_parser.is_valid_response(url, matching=redirect_uri):
            logger.debug("Ignoring URL that does not match the redirect URI: %s", url)
            return False

        attempt.callback_received = True
        result = self.response_parser(url)
        if isinstance(result, Failure):
            logger.info("Authorization failed: %s", result.error)
            self._finish(attempt, result)
            return True

        client: Client = result.value
        if attempt.pkce is None:
            self._finish(attempt, Success(client))
            return True

        if not client.authorization_code:
            self._finish(attempt, Failure(UberAuthError.invalid_response()))
            return True

        logger.debug("Exchanging authorization code for access token")
        request = TokenRequest(
            client_id=self.configuration_provider.client_id,
            redirect_uri=redirect_uri,
            code=client.authorization_code,
            code_verifier=attempt.pkce.code_verifier,
        )
        try:
            token = await self.network_provider.execute(request)
        except UberAuthError as e:
            logger.warning("Token exchange failed: %s", e)
            self._finish(attempt, Failure(e))
            return True
        except Exception as e:
            logger.exception("Token exchange failed unexpectedly")
            self._finish(attempt, Failure(UberAuthError.network_error(e)))
            return True

        self._finish(attempt, Success(Client.from_access_token(token)))
        return True

    async def _route(
        self, attempt: _Attempt, destination: AuthDestination, prefill: Prefill | None
    ) -> None:
        client_id = self.configuration_provider.client_id
        redirect_uri = self.configuration_provider.redirect_uri

        request_uri = None
        if prefill is not None:
            par = await self.network_provider.execute(
                ParRequest(client_id=client_id, redirect_uri=redirect_uri, prefill=prefill)
            )
            if self._attempt is not attempt:
                return
            request_uri = par.request_uri

        request = AuthorizeRequest(
            client_id=client_id,
            redirect_uri=redirect_uri,
            scopes=self.scopes,
            sdk_version=self.configuration_provider.sdk_version,
            prompt=self.prompt,
            pkce=attempt.pkce,
            request_uri=request_uri,
        )

        if isinstance(destination, Native):
            await self._execute_native(attempt, request, destination.app_priority)
        else:
            await self._execute_in_app(attempt, request)

    async def _execute_native(
        self, attempt: _Attempt, request: AuthorizeRequest, app_priority: Sequence[UberApp]
    ) -> None:
        for app in app_priority:
            if not self.configuration_provider.is_installed(app, default_if_unregistered=True):
                logger.debug("%s app not installed", app.value)
                continue

            url = replace(request, app=app).url(self.configuration_provider.auth_host)
            logger.info("Launching %s app for authorization", app.value)
            handled = await self.application_launcher.launch(url)
            if self._attempt is not attempt:
                return
            if handled:
                return
            logger.info("%s app did not handle the authorize URL", app.value)
            break

        logger.info("Falling back to in-app authorization")
        await self._execute_in_app(attempt, request)

    async def _execute_in_app(self, attempt: _Attempt, request: AuthorizeRequest) -> None:
        url = request.url(self.configuration_provider.auth_host)

        async def on_session_complete(result: Result) -> None:
            if self._attempt is not attempt:
                return
            if isinstance(result, Failure):
                logger.info("Browser session ended: %s", result.error)
                self._finish(attempt, result)
                return
            handled = await self.handle(result.value)
            if not handled and not attempt.callback_received:
                self._finish(attempt, Failure(UberAuthError.invalid_response()))

        session = self.session_builder(url, self.configuration_provider.redirect_uri, on_session_complete)
        attempt.session = session
        await session.start()

    def _finish(self, attempt: _Attempt, result: Result) -> None:
        """Clear the attempt slot, then deliver ``result``."""
        if self._attempt is not attempt:
            return
        self._attempt = None
        if attempt.session is not None:
            attempt.session.cancel()
        attempt.completion(result)
