"""SQL-backed storage of hashed tokens."""

from __future__ import annotations

from datetime import timedelta, timezone
from typing import Any

from femtrack.tokens import Token, generate_token


class SQLTokenStore:
    """Token storage over a DB-API connection using ``?`` placeholders."""

    def __init__(self, db: Any) -> None:
        self._db = db

    def create_new_token(self, user_id: int, ttl: timedelta, scope: str) -> Token:
        """Generate a token for ``user_id``, store it and return it."""
        token = generate_token(user_id, ttl, scope)
        self.insert(token)
        return token

    def insert(self, token: Token) -> None:
        """Store the hash, owner, expiry and scope of ``token``."""
        expiry = token.expiry.astimezone(timezone.utc).isoformat(timespec="microseconds")
        self._execute(
            "INSERT INTO tokens (hash, user_id, expiry, scope) VALUES (?, ?, ?, ?)",
            (token.hash, token.user_id, expiry, token.scope),
        )

    def delete_all_tokens_for_user(self, user_id: int, scope: str) -> None:
        """Remove every token of ``user_id`` in ``scope``."""
        self._execute("DELETE FROM tokens WHERE scope = ? AND user_id = ?", (scope, user_id))

    def _execute(self, query: str, params: tuple) -> None:
        cur = self._db.cursor()
        try:
            cur.execute(query, params)
            self._db.commit()
        except BaseException:
            self._db.rollback()
            raise
        finally:
            cur.close()