"""Browser authentication session with a loopback redirect listener."""

import asyncio
import html
import logging
import webbrowser
from importlib.resources import files
from urllib.parse import urlsplit, urlunsplit

from aiohttp import web

from uberauth.auth.interfaces import SessionCompletion
from uberauth.auth.result import Failure, Result, Success
from uberauth.exceptions import OAuthCallbackError, UberAuthError
from uberauth.settings import get_settings

logger = logging.getLogger(__name__)

LOOPBACK_HOSTS = frozenset({"127.0.0.1", "localhost", "::1"})


def is_loopback_redirect(redirect_uri: str) -> bool:
    """True if a CallbackServer can capture redirects to ``redirect_uri``."""
    parts = urlsplit(redirect_uri)
    return parts.scheme == "http" and parts.hostname in LOOPBACK_HOSTS


def get_success_page() -> str:
    """Load the success HTML page."""
    return files("uberauth.auth").joinpath("pages/success.html").read_text()


def _get_error_page(message: str) -> str:
    """Generate error HTML page."""
    return f"""<!DOCTYPE html>
<html>
<head><title>Authentication Error</title></head>
<body style="background:#000;color:#f85149;font-family:monospace;padding:2rem;">
<h1>Authentication Error</h1>
<p>{html.escape(message)}</p>
</body>
</html>"""


class CallbackServer:
    """Temporary HTTP server that captures one redirect to a loopback URI."""

    def __init__(self, redirect_uri: str):
        """Initialize callback server.

        Args:
            redirect_uri: Loopback redirect URI; its host, port and path are
                served. Port 0 or no port binds a random available port.
        """
        parts = urlsplit(redirect_uri)
        self.host = parts.hostname or "127.0.0.1"
        self.path = parts.path or "/"
        self._scheme = parts.scheme
        self._requested_port = parts.port or 0
        self.port = 0
        self._runner: web.AppRunner | None = None
        self._site: web.TCPSite | None = None
        self._url_future: asyncio.Future[str] | None = None

    @property
    def callback_url(self) -> str:
        """Get the callback URL for this server."""
        return f"{self._scheme}://{self._netloc}{self.path}"

    @property
    def _netloc(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{host}:{self.port}"

    async def start(self) -> None:
        """Start the callback server."""
        app = web.Application()
        app.router.add_get(self.path, self._handle_callback)

        self._runner = web.AppRunner(app)
        await self._runner.setup()

        self._site = web.TCPSite(self._runner, self.host, self._requested_port)
        await self._site.start()

        # Get actual port if we requested 0
        assert self._site._server is not None
        sockets = self._site._server.sockets
        if sockets:
            self.port = sockets[0].getsockname()[1]

        self._url_future = asyncio.get_running_loop().create_future()
        logger.debug("Callback server started on %s:%d%s", self.host, self.port, self.path)

    async def stop(self) -> None:
        """Stop the callback server."""
        if self._runner:
            await self._runner.cleanup()
        self._runner = None
        self._site = None

    async def wait_for_callback(self) -> str:
        """Wait for the redirect and return the full callback URL.

        Raises:
            OAuthCallbackError: If the server was not started or was aborted.
        """
        if self._url_future is None:
            raise OAuthCallbackError("Callback server is not running")
        return await self._url_future

    def abort(self, reason: str) -> None:
        """Fail any pending wait_for_callback."""
        if self._url_future and not self._url_future.done():
            self._url_future.set_exception(OAuthCallbackError(reason))

    async def _handle_callback(self, request: web.Request) -> web.Response:
        """Record the redirect; parsing is left to the response parser."""
        url = urlunsplit((self._scheme, self._netloc, request.path, request.query_string, ""))

        if self._url_future and not self._url_future.done():
            logger.debug("Received authorization redirect")
            self._url_future.set_result(url)

        if "error" in request.query:
            message = f"OAuth error: {request.query['error']}"
            return web.Response(text=_get_error_page(message), content_type="text/html")

        return web.Response(text=get_success_page(), content_type="text/html")


class LoopbackAuthenticationSession:
    """Opens the system browser and waits for the redirect.

    Redirect URIs on a loopback host are captured by a CallbackServer and
    reported as ``Success(callback_url)``. Any other redirect URI is left to
    the OS to route back into the application through ``handle``. Either way,
    no redirect within ``timeout`` seconds reports ``cancelled``.

    ``cancel`` tears the session down without reporting; the owner calls it
    once the attempt has already finished.
    """

    def __init__(
        self,
        url: str,
        redirect_uri: str,
        completion: SessionCompletion,
        timeout: float | None = None,
    ):
        self.url = url
        self.redirect_uri = redirect_uri
        self._completion = completion
        self._timeout = timeout if timeout is not None else get_settings().callback_timeout
        self._server: CallbackServer | None = None
        self._task: asyncio.Task[None] | None = None
        self._done = False

        if is_loopback_redirect(redirect_uri):
            self._server = CallbackServer(redirect_uri)

    @property
    def is_active(self) -> bool:
        return self._task is not None and not self._done

    async def start(self) -> None:
        """Start listening and open the browser; the outcome arrives via completion."""
        if self._server is not None:
            try:
                await self._server.start()
            except OSError as e:
                logger.error("Could not listen on %s: %s", self.redirect_uri, e)
                await self._stop_server()
                await self._finish(Failure(UberAuthError.network_error(e)))
                return
        else:
            logger.warning(
                "Redirect URI %s is not an http loopback address; "
                "the redirect must be passed to handle() within %ss",
                self.redirect_uri,
                self._timeout,
            )

        opened = await asyncio.to_thread(webbrowser.open, self.url)
        if not opened:
            logger.warning("No browser available to open the authorization URL")
            await self._stop_server()
            await self._finish(Failure(UberAuthError.cancelled()))
            return

        logger.info("Opened browser for authorization")
        self._task = asyncio.create_task(self._wait())

    def cancel(self) -> None:
        """Stop waiting without reporting an outcome."""
        if self._done:
            return
        self._done = True
        if self._server is not None:
            self._server.abort("Session cancelled")
        if self._task is not None:
            self._task.cancel()

    async def _wait(self) -> None:
        try:
            url = await asyncio.wait_for(self._receive(), timeout=self._timeout)
        except TimeoutError:
            logger.warning("Authorization timed out (no redirect received)")
            result: Result = Failure(UberAuthError.cancelled())
        except OAuthCallbackError as e:
            logger.debug("Callback wait aborted: %s", e)
            result = Failure(UberAuthError.cancelled())
        else:
            result = Success(url)
        finally:
            await self._stop_server()
        await self._finish(result)

    async def _receive(self) -> str:
        if self._server is not None:
            return await self._server.wait_for_callback()
        # Redirect arrives through the OS; only the timeout ends this wait
        return await asyncio.get_running_loop().create_future()

    async def _stop_server(self) -> None:
        if self._server is not None:
            await self._server.stop()

    async def _finish(self, result: Result) -> None:
        if self._done:
            return
        self._done = True
        await self._completion(result)


def loopback_session_builder(
    url: str, redirect_uri: str, completion: SessionCompletion
) -> LoopbackAuthenticationSession:
    """Default SessionBuilder for AuthorizationCodeAuthProvider."""
    return LoopbackAuthenticationSession(url, redirect_uri, completion)
