"""The application object: stores, handlers and middleware wired together."""

from __future__ import annotations

import logging
import sys
from typing import Any

from werkzeug.wrappers import Request, Response

from femtrack.middleware import UserMiddleware
from femtrack.token_handler import TokenHandler
from femtrack.token_store import SQLTokenStore
from femtrack.user_store import SQLUserStore
from femtrack.workout_handler import WorkoutHandler
from femtrack.workout_store import SQLWorkoutStore


def _default_logger() -> logging.Logger:
    logger = logging.getLogger("femtrack")
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(asctime)s %(message)s", "%Y/%m/%d %H:%M:%S"))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    return logger


class Application:
    """Everything the HTTP routes need, built over one database connection."""

    def __init__(self, db: Any, logger: logging.Logger | None = None) -> None:
        self.db = db
        self.logger = logger if logger is not None else _default_logger()

        self.workout_store = SQLWorkoutStore(db)
        self.user_store = SQLUserStore(db)
        self.token_store = SQLTokenStore(db)

        self.workout_handler = WorkoutHandler(self.workout_store, self.logger)
        self.token_handler = TokenHandler(self.token_store, self.user_store, self.logger)
        self.middleware = UserMiddleware(self.user_store)

    def health_check(self, request: Request) -> Response:
        """Report that the service is up."""
        return Response("Status is available\n", content_type="text/plain; charset=utf-8")