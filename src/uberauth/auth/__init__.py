"""Authorization code + PKCE login."""

from uberauth.auth.dispatcher import UberAuth
from uberauth.auth.models import (
    AccessToken,
    AuthContext,
    AuthDestination,
    AuthorizationCodeConfig,
    Client,
    InApp,
    Native,
    Par,
    Prefill,
    Prompt,
    UberApp,
)
from uberauth.auth.parser import AuthorizationCodeResponseParser
from uberauth.auth.pkce import PKCEPair, generate_pkce
from uberauth.auth.provider import AuthorizationCodeAuthProvider
from uberauth.auth.result import Completion, Failure, Result, Success
from uberauth.auth.storage import TokenManager

__all__ = [
    "AccessToken",
    "AuthContext",
    "AuthDestination",
    "AuthorizationCodeAuthProvider",
    "AuthorizationCodeConfig",
    "AuthorizationCodeResponseParser",
    "Client",
    "Completion",
    "Failure",
    "InApp",
    "Native",
    "PKCEPair",
    "Par",
    "Prefill",
    "Prompt",
    "Result",
    "Success",
    "TokenManager",
    "UberApp",
    "UberAuth",
    "generate_pkce",
]
