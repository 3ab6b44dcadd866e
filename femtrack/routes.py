"""URL routing: the WSGI entry point of the service."""

from __future__ import annotations

from collections.abc import Iterable
from http import HTTPStatus
from typing import Any, Callable

from werkzeug.exceptions import HTTPException, MethodNotAllowed, NotFound
from werkzeug.routing import Map, Rule
from werkzeug.wrappers import Request, Response

from femtrack.app import Application
from femtrack.utils import URL_PARAMS_KEY

Handler = Callable[[Request], Response]


class Router:
    """A WSGI application dispatching (method, path) pairs to handlers."""

    def __init__(self, routes: Iterable[tuple[str, str, Handler]]) -> None:
        self._handlers: dict[str, Handler] = {}
        rules = []
        for method, path, handler in routes:
            endpoint = f"{method} {path}"
            self._handlers[endpoint] = handler
            rules.append(Rule(path, methods=[method], endpoint=endpoint))
        self._map = Map(rules, merge_slashes=False)

    def _dispatch(self, environ: dict[str, Any]) -> Response:
        adapter = self._map.bind_to_environ(environ)
        try:
            endpoint, args = adapter.match()
        except MethodNotAllowed as exc:
            response = Response(status=HTTPStatus.METHOD_NOT_ALLOWED)
            if exc.valid_methods:
                response.headers["Allow"] = ", ".join(exc.valid_methods)
            return response
        except NotFound:
            return Response(
                "404 page not found\n",
                status=HTTPStatus.NOT_FOUND,
                content_type="text/plain; charset=utf-8",
            )
        except HTTPException as exc:
            return exc.get_response(environ)
        environ[URL_PARAMS_KEY] = dict(args)
        return self._handlers[endpoint](Request(environ))

    def __call__(self, environ: dict[str, Any], start_response: Callable) -> Iterable[bytes]:
        return self._dispatch(environ)(environ, start_response)


def setup_routes(app: Application) -> Router:
    """Build the router for ``app``; workout routes require a logged-in user."""
    middleware = app.middleware

    def protected(handler: Handler) -> Handler:
        return middleware.authenticate(middleware.require_user(handler))

    workouts = app.workout_handler
    return Router(
        [
            ("GET", "/workouts/<id>", protected(workouts.handle_get_workout_by_id)),
            ("PUT", "/workouts/<id>", protected(workouts.handle_update_workout_by_id)),
            ("DELETE", "/workouts/<id>", protected(workouts.handle_delete_workout_by_id)),
            ("POST", "/workouts", protected(workouts.handle_create_workout)),
            ("GET", "/health", app.health_check),
            ("POST", "/tokens/authentication", app.token_handler.handle_create_token),
        ]
    )