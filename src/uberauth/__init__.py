"""uberauth: OAuth 2.0 authorization code + PKCE login for Uber apps."""

__version__ = "2.0.0"
