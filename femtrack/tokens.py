"""Opaque bearer tokens: generation, hashing and serialisation."""

from __future__ import annotations

import base64
import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

SCOPE_AUTH = "authentication"

_TOKEN_BYTES = 32


@dataclass
class Token:
    """A freshly issued token; only the hash is ever stored."""

    plaintext: str
    hash: bytes
    user_id: int
    expiry: datetime
    scope: str

    def to_dict(self) -> dict[str, Any]:
        """Return the public JSON form of the token."""
        return {"token": self.plaintext, "expiry": self.expiry.isoformat()}


def generate_token(user_id: int, ttl: timedelta, scope: str) -> Token:
    """Create a random token for ``user_id`` that expires after ``ttl``."""
    raw = secrets.token_bytes(_TOKEN_BYTES)
    plaintext = base64.b32encode(raw).decode("ascii").rstrip("=")
    return Token(
        plaintext=plaintext,
        hash=hashlib.sha256(plaintext.encode("utf-8")).digest(),
        user_id=user_id,
        expiry=datetime.now(timezone.utc) + ttl,
        scope=scope,
    )