"""Outbound request descriptors for the authorization server."""

import base64
import json
from dataclasses import dataclass
from typing import Any, ClassVar
from urllib.parse import quote, urlencode

from uberauth.auth.models import AccessToken, Par, Prefill, Prompt, UberApp
from uberauth.auth.pkce import PKCEPair

SDK_NAME = "python"


@dataclass(frozen=True)
class AuthorizeRequest:
    """The authorize URL a browser session or companion app is sent to.

    With ``app`` set the URL targets that app's authorize endpoint and never
    asks for ``prompt=login``, since the app already holds a signed-in user.
    """

    client_id: str
    redirect_uri: str
    scopes: tuple[str, ...]
    sdk_version: str
    prompt: Prompt = Prompt(0)
    pkce: PKCEPair | None = None
    request_uri: str | None = None
    app: UberApp | None = None

    @property
    def path(self) -> str:
        if self.app is None:
            return "/oauth/v2/authorize"
        return f"/oauth/v2/{self.app.url_identifier}/authorize"

    def query_items(self) -> dict[str, str]:
        """Query parameters in the order they appear in the URL."""
        items = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": " ".join(self.scopes),
        }

        prompt = self.prompt
        if self.app is not None:
            prompt &= ~Prompt.LOGIN
        if prompt.string_value:
            items["prompt"] = prompt.string_value

        if self.pkce is not None:
            items["code_challenge"] = self.pkce.code_challenge
            items["code_challenge_method"] = self.pkce.method

        if self.request_uri:
            items["request_uri"] = self.request_uri

        items["sdk"] = SDK_NAME
        items["sdk_version"] = self.sdk_version
        return items

    def url(self, host: str) -> str:
        return f"{host.rstrip('/')}{self.path}?{urlencode(self.query_items(), quote_via=quote)}"


@dataclass(frozen=True)
class ParRequest:
    """Pushed authorization request registering prefill data ahead of login."""

    method: ClassVar[str] = "POST"
    path: ClassVar[str] = "/oauth/v2/par"

    client_id: str
    redirect_uri: str
    prefill: Prefill

    @property
    def login_hint(self) -> str:
        """base64url encoded JSON of the non-empty prefill fields."""
        hint = {
            "email": self.prefill.email,
            "phone": self.prefill.phone_number,
            "first_name": self.prefill.first_name,
            "last_name": self.prefill.last_name,
        }
        payload = json.dumps({k: v for k, v in hint.items() if v}, separators=(",", ":"))
        return base64.urlsafe_b64encode(payload.encode("utf-8")).rstrip(b"=").decode("ascii")

    @property
    def body(self) -> dict[str, str]:
        return {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "login_hint": self.login_hint,
        }

    def decode(self, data: dict[str, Any]) -> Par:
        return Par.model_validate(data)


@dataclass(frozen=True)
class TokenRequest:
    """Authorization code exchange."""

    method: ClassVar[str] = "POST"
    path: ClassVar[str] = "/oauth/v2/token"

    client_id: str
    redirect_uri: str
    code: str
    code_verifier: str

    @property
    def body(self) -> dict[str, str]:
        return {
            "grant_type": "authorization_code",
            "code": self.code,
            "code_verifier": self.code_verifier,
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
        }

    def decode(self, data: dict[str, Any]) -> AccessToken:
        return AccessToken.model_validate(data)
