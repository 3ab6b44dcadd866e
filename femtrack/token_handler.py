"""HTTP handler that exchanges credentials for an authentication token."""

from __future__ import annotations

import json
import logging
from datetime import timedelta
from http import HTTPStatus
from typing import Any

from werkzeug.wrappers import Request, Response

from femtrack.tokens import SCOPE_AUTH
from femtrack.utils import write_json

_TOKEN_TTL = timedelta(hours=24)


def _decode_body(request: Request) -> Any:
    text = request.get_data(as_text=True).lstrip()
    if not text:
        raise ValueError("empty request body")
    value, _ = json.JSONDecoder().raw_decode(text)
    return value


def _credentials(payload: Any) -> tuple[str, str]:
    if payload is None:
        return "", ""
    if not isinstance(payload, dict):
        raise ValueError("request body must be an object")
    values = []
    for key in ("username", "password"):
        value = payload.get(key)
        if value is None:
            value = ""
        elif not isinstance(value, str):
            raise ValueError(f"{key} must be a string")
        values.append(value)
    return values[0], values[1]


class TokenHandler:
    """Issues authentication tokens to users with valid credentials."""

    def __init__(self, token_store: Any, user_store: Any, logger: logging.Logger) -> None:
        self._token_store = token_store
        self._user_store = user_store
        self._logger = logger

    def _internal_error(self) -> Response:
        return write_json(HTTPStatus.INTERNAL_SERVER_ERROR, {"error": "internal server error"})

    def handle_create_token(self, request: Request) -> Response:
        """Check username and password and answer with a new 24-hour token."""
        try:
            username, plain_password = _credentials(_decode_body(request))
        except ValueError as exc:
            self._logger.error("ERROR: createTokenRequest: %s", exc)
            return write_json(HTTPStatus.BAD_REQUEST, {"error": "invalid request payload"})

        try:
            user = self._user_store.get_user_by_username(username)
        except Exception as exc:
            self._logger.error("ERROR: GetUserByUsername: %s", exc)
            return self._internal_error()
        if user is None:
            self._logger.error("ERROR: GetUserByUsername: no user named %r", username)
            return self._internal_error()

        try:
            matched = user.password_hash.matches(plain_password)
        except ValueError as exc:
            self._logger.error("ERROR: PasswordHash.Matches: %s", exc)
            return self._internal_error()

        if not matched:
            return write_json(HTTPStatus.UNAUTHORIZED, {"error": "invalid credentials"})

        try:
            token = self._token_store.create_new_token(user.id, _TOKEN_TTL, SCOPE_AUTH)
        except Exception as exc:
            self._logger.error("ERROR: Creating Token: %s", exc)
            return self._internal_error()

        return write_json(HTTPStatus.CREATED, {"auth_token": token})