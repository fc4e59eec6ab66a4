"""Entry point that routes login requests and redirects to a provider."""

import asyncio
import logging
from collections.abc import Callable

from uberauth.auth.models import AccessToken, AuthContext, AuthorizationCodeConfig, Client
from uberauth.auth.provider import AuthorizationCodeAuthProvider
from uberauth.auth.result import Completion, Result, Success
from uberauth.auth.storage import TokenManager

logger = logging.getLogger(__name__)

ProviderBuilder = Callable[[AuthorizationCodeConfig], AuthorizationCodeAuthProvider]


def _access_token(client: Client) -> AccessToken | None:
    if client.access_token is None:
        return None
    return AccessToken(
        token_string=client.access_token,
        token_type=client.token_type or "Bearer",
        refresh_token=client.refresh_token,
        expires_in=client.expires_in,
        scope=client.scope,
    )


class UberAuth:
    """Starts logins, forwards redirects, and keeps the resulting token.

    A fresh provider is built for each login unless the current one still
    has an attempt in flight; that provider then rejects the new login with
    ``existing_auth_session``.
    """

    def __init__(
        self,
        token_manager: TokenManager | None = None,
        provider_builder: ProviderBuilder | None = None,
    ):
        self.token_manager = token_manager or TokenManager()
        self._provider_builder = provider_builder or AuthorizationCodeAuthProvider.from_config
        self.current_provider: AuthorizationCodeAuthProvider | None = None
        self._pending: set[asyncio.Task[None]] = set()

    async def login(self, context: AuthContext, completion: Completion) -> None:
        """Start a login described by ``context``; the outcome goes to ``completion``."""
        provider = self.current_provider
        if provider is None or not provider.is_in_flight:
            provider = self._provider_builder(context.config)
            self.current_provider = provider

        def deliver(result: Result) -> None:
            token = _access_token(result.value) if isinstance(result, Success) else None
            if token is None:
                completion(result)
                return
            task = asyncio.create_task(self._save_and_deliver(token, result, completion))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

        await provider.execute(context.destination, context.prefill, completion=deliver)

    async def authenticate(self, context: AuthContext) -> Result:
        """Run a login and wait for its outcome.

        For native destinations the outcome only arrives once the redirect is
        passed to ``handle``, so call that from another task.
        """
        future: asyncio.Future[Result] = asyncio.get_running_loop().create_future()

        def resolve(result: Result) -> None:
            if not future.done():
                future.set_result(result)

        await self.login(context, resolve)
        return await future

    async def handle(self, url: str) -> bool:
        """Forward a redirect to the current provider."""
        if self.current_provider is None:
            return False
        return await self.current_provider.handle(url)

    async def logout(self) -> bool:
        """Forget the stored access token."""
        return await self.token_manager.delete_token()

    async def is_logged_in(self) -> bool:
        return await self.token_manager.get_token() is not None

    async def _save_and_deliver(
        self, token: AccessToken, result: Result, completion: Completion
    ) -> None:
        try:
            await self.token_manager.save_token(token)
            logger.debug("Saved access token")
        except OSError as e:
            logger.warning("Failed to save access token: %s", e)
        completion(result)
