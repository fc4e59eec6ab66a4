"""Application launcher backed by the system URL opener."""

import asyncio
import logging
import webbrowser

logger = logging.getLogger(__name__)


class BrowserApplicationLauncher:
    """Hands URLs to ``webbrowser``, which defers to the OS URL handlers."""

    async def launch(self, url: str) -> bool:
        """Open ``url`` without blocking the event loop.

        Returns:
            True if a handler accepted the URL.
        """
        try:
            opened = await asyncio.to_thread(webbrowser.open, url)
        except webbrowser.Error as e:
            logger.warning("Failed to launch %s: %s", url, e)
            return False
        logger.debug("Launch of %s handled=%s", url, opened)
        return opened
