"""Settings-backed configuration provider."""

import logging
import shutil
import subprocess

from uberauth.auth.models import UberApp
from uberauth.settings import Settings, get_settings

logger = logging.getLogger(__name__)

XDG_MIME_TIMEOUT = 5.0


class DefaultConfigurationProvider:
    """Reads client registration from Settings and asks the desktop about apps."""

    def __init__(self, settings: Settings | None = None):
        self._settings = settings or get_settings()

    @property
    def client_id(self) -> str:
        return self._settings.client_id

    @property
    def redirect_uri(self) -> str:
        return self._settings.redirect_uri

    @property
    def sdk_version(self) -> str:
        return self._settings.sdk_version

    @property
    def auth_host(self) -> str:
        return self._settings.auth_host

    def is_installed(self, app: UberApp, default_if_unregistered: bool) -> bool:
        """Check whether a handler is registered for the app's deeplink scheme.

        Schemes missing from ``registered_app_schemes`` cannot be queried, so
        the caller's default is returned for them.
        """
        scheme = app.deeplink_scheme
        if scheme not in self._settings.registered_app_schemes:
            logger.debug("Scheme %s not registered, assuming installed=%s", scheme, default_if_unregistered)
            return default_if_unregistered
        return _has_scheme_handler(scheme)


def _has_scheme_handler(scheme: str) -> bool:
    """Ask xdg-mime for the default x-scheme-handler of ``scheme``."""
    xdg_mime = shutil.which("xdg-mime")
    if xdg_mime is None:
        logger.debug("xdg-mime not available, cannot resolve handler for %s", scheme)
        return False

    try:
        result = subprocess.run(
            [xdg_mime, "query", "default", f"x-scheme-handler/{scheme}"],
            capture_output=True,
            text=True,
            timeout=XDG_MIME_TIMEOUT,
            check=False,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.warning("Failed to query handler for %s: %s", scheme, e)
        return False

    handler = result.stdout.strip()
    logger.debug("Handler for %s: %s", scheme, handler or "(none)")
    return result.returncode == 0 and bool(handler)
