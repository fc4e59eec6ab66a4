"""Token storage for access tokens obtained by login."""

import logging
import os
from pathlib import Path

import aiofiles
from pydantic import BaseModel, ValidationError

from uberauth.auth.models import AccessToken

logger = logging.getLogger(__name__)

TOKENS_FILE = "tokens.json"
DEFAULT_ACCESS_TOKEN_IDENTIFIER = "UberAccessTokenKey"


class TokenStore(BaseModel):
    """On-disk model: access tokens keyed by identifier."""

    tokens: dict[str, AccessToken] = {}


def _get_tokens_path() -> Path:
    """Get the path to the token storage file.

    Uses XDG_DATA_HOME if set, otherwise ~/.local/share/uberauth/tokens.json
    """
    xdg_data = os.environ.get("XDG_DATA_HOME")
    if xdg_data:
        base = Path(xdg_data)
    else:
        base = Path.home() / ".local" / "share"
    return base / "uberauth" / TOKENS_FILE


class TokenManager:
    """Saves, retrieves and deletes access tokens by identifier."""

    def __init__(self, path: Path | None = None):
        self._path = path

    @property
    def path(self) -> Path:
        return self._path or _get_tokens_path()

    async def save_token(
        self, token: AccessToken, identifier: str = DEFAULT_ACCESS_TOKEN_IDENTIFIER
    ) -> None:
        """Save a token, preserving tokens stored under other identifiers."""
        store = await self._load()
        store.tokens[identifier] = token
        await self._save(store)

    async def get_token(
        self, identifier: str = DEFAULT_ACCESS_TOKEN_IDENTIFIER
    ) -> AccessToken | None:
        store = await self._load()
        return store.tokens.get(identifier)

    async def delete_token(self, identifier: str = DEFAULT_ACCESS_TOKEN_IDENTIFIER) -> bool:
        """Remove a token.

        Returns:
            True if a token was stored under ``identifier``.
        """
        store = await self._load()
        if store.tokens.pop(identifier, None) is None:
            return False
        await self._save(store)
        return True

    async def _load(self) -> TokenStore:
        """Load store from disk. Returns empty store if not found or unreadable."""
        path = self.path
        if not path.exists():
            return TokenStore()

        try:
            async with aiofiles.open(path) as f:
                content = await f.read()
            return TokenStore.model_validate_json(content)
        except (ValidationError, OSError, ValueError) as e:
            logger.warning("Failed to load token store from %s: %s", path, e)
            return TokenStore()

    async def _save(self, store: TokenStore) -> None:
        """Save store to disk with secure permissions."""
        path = self.path
        path.parent.mkdir(parents=True, exist_ok=True, mode=0o700)

        # Write to temp file first for atomic operation
        temp_path = path.with_suffix(".tmp")
        async with aiofiles.open(temp_path, "w") as f:
            await f.write(store.model_dump_json(indent=2, by_alias=True))

        # Set restrictive permissions before rename
        temp_path.chmod(0o600)
        temp_path.rename(path)
