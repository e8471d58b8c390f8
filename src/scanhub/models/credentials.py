"""Typed credentials attached to a scan task.

Credentials are parsed once at the boundary from an explicit
``Authorization``-style value (``Bearer <jwt>`` or ``Basic <b64>``).
Everything downstream consumes the typed variant.
"""

import base64
import binascii
from dataclasses import dataclass

from scanhub.errors import ValidationError


@dataclass(frozen=True)
class JwtCredential:
    """Bearer token credential."""

    token: str
    kind = "jwt"

    def authorization_header(self) -> str:
        return f"Bearer {self.token}"

    def __repr__(self) -> str:
        return "JwtCredential(token=***)"


@dataclass(frozen=True)
class BasicCredential:
    """Username/password credential."""

    username: str
    password: str
    kind = "basic"

    def authorization_header(self) -> str:
        raw = f"{self.username}:{self.password}".encode()
        return f"Basic {base64.b64encode(raw).decode('ascii')}"

    def __repr__(self) -> str:
        return f"BasicCredential(username={self.username!r}, password=***)"


Credential = JwtCredential | BasicCredential


def credential_from_header(value: str | None) -> Credential | None:
    """Build a credential from an ``Authorization`` header value.

    Returns None for a missing or blank value.
    """
    if value is None or not value.strip():
        return None

    scheme, _, payload = value.strip().partition(" ")
    payload = payload.strip()
    scheme = scheme.lower()

    if scheme == "bearer" and payload:
        if payload.count(".") < 1:
            raise ValidationError("credentials", "Bearer ***", "Bearer token is not a JWT")
        return JwtCredential(token=payload)

    if scheme == "basic" and payload:
        try:
            decoded = base64.b64decode(payload, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            raise ValidationError(
                "credentials", "Basic ***", "Basic credentials are not valid base64"
            ) from None
        username, sep, password = decoded.partition(":")
        if not sep or not username:
            raise ValidationError(
                "credentials", "Basic ***", "Basic credentials must be username:password"
            )
        return BasicCredential(username=username, password=password)

    raise ValidationError(
        "credentials", scheme or value, "Credentials must use the Bearer or Basic scheme"
    )
