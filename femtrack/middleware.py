"""Request authentication: attaching the current user to each request."""

from __future__ import annotations

import functools
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Callable

from werkzeug.wrappers import Request, Response

from femtrack.tokens import SCOPE_AUTH
from femtrack.user_store import ANONYMOUS_USER, User
from femtrack.utils import write_json

Handler = Callable[[Request], Response]

USER_ENVIRON_KEY = "femtrack.user"


def set_user(request: Request, user: User | None) -> Request:
    """Attach ``user`` to ``request`` and return the request."""
    request.environ[USER_ENVIRON_KEY] = user
    return request


def get_user(request: Request) -> User | None:
    """Return the user attached to ``request``; raise RuntimeError if there is none."""
    if USER_ENVIRON_KEY not in request.environ:
        raise RuntimeError("missing user in request")
    user = request.environ[USER_ENVIRON_KEY]
    if user is not None and not isinstance(user, User):
        raise RuntimeError("missing user in request")
    return user


@dataclass
class UserMiddleware:
    """Resolves bearer tokens to users through a user store."""

    user_store: Any

    def authenticate(self, handler: Handler) -> Handler:
        """Wrap ``handler`` so that every request carries a user."""

        @functools.wraps(handler)
        def wrapper(request: Request) -> Response:
            response = self._authenticate(request, handler)
            response.headers.add("Vary", "Authorization")
            return response

        return wrapper

    def _authenticate(self, request: Request, handler: Handler) -> Response:
        auth_header = request.headers.get("Authorization", "")
        if auth_header == "":
            return handler(set_user(request, ANONYMOUS_USER))

        parts = auth_header.split(" ")
        if len(parts) != 2 or parts[0] != "Bearer":
            return write_json(HTTPStatus.UNAUTHORIZED, {"error": "invalid authorization header"})

        try:
            user = self.user_store.get_user_token(SCOPE_AUTH, parts[1])
        except Exception as exc:
            return write_json(HTTPStatus.UNAUTHORIZED, {"error": str(exc)})

        if user is None:
            return write_json(HTTPStatus.UNAUTHORIZED, {"error": "token expired"})

        return handler(set_user(request, user))

    def require_user(self, handler: Handler) -> Handler:
        """Wrap ``handler`` so that anonymous requests are refused."""

        @functools.wraps(handler)
        def wrapper(request: Request) -> Response:
            user = get_user(request)
            if user is not None and user.is_anonymous():
                return write_json(
                    HTTPStatus.UNAUTHORIZED,
                    {"error": "you must be logged in to access this route"},
                )
            return handler(request)

        return wrapper