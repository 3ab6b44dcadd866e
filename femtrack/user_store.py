"""Users, password hashing and the SQL-backed user store."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import bcrypt

_BCRYPT_COST = 12
_BCRYPT_MAX_BYTES = 72


class RowNotFoundError(LookupError):
    """No row matched the requested change."""


def _parse_time(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


@dataclass
class Password:
    """A bcrypt password hash, with the plain text kept only when set locally."""

    plain_text: str | None = None
    hash: bytes = b""

    def set(self, plain_text: str) -> None:
        """Hash ``plain_text``; passwords bcrypt cannot take are left unset."""
        encoded = plain_text.encode("utf-8")
        if len(encoded) > _BCRYPT_MAX_BYTES:
            return
        self.hash = bcrypt.hashpw(encoded, bcrypt.gensalt(_BCRYPT_COST))
        self.plain_text = plain_text

    def matches(self, plain_text: str) -> bool:
        """Check ``plain_text`` against the hash; raise ValueError on a bad hash."""
        try:
            return bcrypt.checkpw(plain_text.encode("utf-8"), bytes(self.hash))
        except ValueError as exc:
            raise ValueError("invalid password hash") from exc


@dataclass(eq=False)
class User:
    id: int = 0
    username: str = ""
    email: str = ""
    password_hash: Password = field(default_factory=Password)
    bio: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def is_anonymous(self) -> bool:
        """True only for the shared anonymous user."""
        return self is ANONYMOUS_USER

    def to_dict(self) -> dict[str, Any]:
        """Return the public JSON form; the password hash is never included."""
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "bio": self.bio,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


ANONYMOUS_USER = User()

_USER_COLUMNS = "id, username, email, password_hash, bio, created_at, updated_at"


def _row_to_user(row: tuple) -> User:
    user_id, username, email, pw_hash, bio, created_at, updated_at = row
    return User(
        id=user_id,
        username=username,
        email=email,
        password_hash=Password(hash=bytes(pw_hash) if pw_hash is not None else b""),
        bio=bio if bio is not None else "",
        created_at=_parse_time(created_at),
        updated_at=_parse_time(updated_at),
    )


class SQLUserStore:
    """User storage over a DB-API connection using ``?`` placeholders."""

    def __init__(self, db: Any) -> None:
        self._db = db

    def create_user(self, user: User) -> None:
        """Insert ``user`` and fill in its id and timestamps."""
        cur = self._db.cursor()
        try:
            cur.execute(
                "INSERT INTO users (username, email, password_hash, bio) VALUES (?, ?, ?, ?)",
                (user.username, user.email, user.password_hash.hash, user.bio),
            )
            user.id = cur.lastrowid
            cur.execute("SELECT created_at, updated_at FROM users WHERE id = ?", (user.id,))
            created_at, updated_at = cur.fetchone()
            self._db.commit()
        except BaseException:
            self._db.rollback()
            raise
        finally:
            cur.close()
        user.created_at = _parse_time(created_at)
        user.updated_at = _parse_time(updated_at)

    def get_user_by_username(self, username: str) -> User | None:
        """Return the user called ``username``, or None."""
        cur = self._db.cursor()
        try:
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE username = ?", (username,))
            row = cur.fetchone()
        finally:
            cur.close()
        return _row_to_user(row) if row is not None else None

    def update_user(self, user: User) -> None:
        """Save name, e-mail and bio; raise RowNotFoundError if no user matched."""
        cur = self._db.cursor()
        try:
            cur.execute(
                "UPDATE users SET username = ?, email = ?, bio = ?, "
                "updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                (user.username, user.email, user.bio, user.id),
            )
            affected = cur.rowcount
            self._db.commit()
        finally:
            cur.close()
        if affected == 0:
            print("No data to match")
            raise RowNotFoundError("no user matched")

    def get_user_token(self, scope: str, plain_text_token: str) -> User | None:
        """Return the owner of an unexpired token in ``scope``, or None."""
        token_hash = hashlib.sha256(plain_text_token.encode("utf-8")).digest()
        now = datetime.now(timezone.utc).isoformat(timespec="microseconds")
        columns = ", ".join(f"u.{name.strip()}" for name in _USER_COLUMNS.split(","))
        cur = self._db.cursor()
        try:
            cur.execute(
                f"SELECT {columns} FROM users u "
                "INNER JOIN tokens t ON t.user_id = u.id "
                "WHERE t.hash = ? AND t.scope = ? AND t.expiry > ?",
                (token_hash, scope, now),
            )
            row = cur.fetchone()
        finally:
            cur.close()
        return _row_to_user(row) if row is not None else None