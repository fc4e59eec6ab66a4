"""PKCE (Proof Key for Code Exchange) utilities for OAuth 2.0."""

import base64
import hashlib
import secrets
from dataclasses import dataclass

CODE_CHALLENGE_METHOD = "S256"


@dataclass(frozen=True)
class PKCEPair:
    """Verifier/challenge pair for one login attempt."""

    code_verifier: str
    code_challenge: str
    method: str = CODE_CHALLENGE_METHOD


def compute_code_challenge(code_verifier: str) -> str:
    """Return base64url(SHA256(verifier)) without padding, per RFC 7636."""
    digest = hashlib.sha256(code_verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def generate_pkce() -> PKCEPair:
    """Generate a fresh PKCE pair.

    Returns:
        PKCEPair whose verifier is 43 characters from the unreserved set.
    """
    # 32 bytes of randomness -> 43 chars in base64url
    verifier_bytes = secrets.token_bytes(32)
    verifier = base64.urlsafe_b64encode(verifier_bytes).rstrip(b"=").decode("ascii")
    return PKCEPair(code_verifier=verifier, code_challenge=compute_code_challenge(verifier))
