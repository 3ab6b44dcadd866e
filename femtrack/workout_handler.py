"""HTTP handlers for creating, reading, updating and deleting workouts."""

from __future__ import annotations

import json
import logging
from http import HTTPStatus
from typing import Any

from werkzeug.wrappers import Request, Response

from femtrack.middleware import get_user
from femtrack.user_store import RowNotFoundError, User
from femtrack.utils import InvalidIDError, read_id_param, write_json
from femtrack.workout_store import Workout, WorkoutEntry


def _decode_body(request: Request) -> Any:
    text = request.get_data(as_text=True).lstrip()
    if not text:
        raise ValueError("empty request body")
    value, _ = json.JSONDecoder().raw_decode(text)
    return value


def _entry(item: Any) -> WorkoutEntry:
    return WorkoutEntry() if item is None else WorkoutEntry.from_dict(item)


def _parse_update(payload: Any) -> dict[str, Any]:
    """Return only the fields an update request actually supplies."""
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValueError("request body must be an object")
    changes: dict[str, Any] = {}
    for key in ("title", "description"):
        value = payload.get(key)
        if value is not None:
            if not isinstance(value, str):
                raise ValueError(f"{key} must be a string")
            changes[key] = value
    for key in ("duration_minutes", "calories_burned"):
        value = payload.get(key)
        if value is not None:
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{key} must be an integer")
            changes[key] = value
    entries = payload.get("entries")
    if entries is not None:
        if not isinstance(entries, list):
            raise ValueError("entries must be a list")
        changes["entries"] = [_entry(item) for item in entries]
    return changes


def _logged_in_user(request: Request) -> User | None:
    user = get_user(request)
    if user is None or user.is_anonymous():
        return None
    return user


def _must_log_in() -> Response:
    return write_json(HTTPStatus.BAD_REQUEST, {"error": "you must be logged in"})


class WorkoutHandler:
    """Workout endpoints backed by a workout store."""

    def __init__(self, workout_store: Any, logger: logging.Logger) -> None:
        self._workout_store = workout_store
        self._logger = logger

    def _ownership_error(self, workout_id: int, user: User, action: str) -> Response | None:
        try:
            owner = self._workout_store.get_workout_owner(workout_id)
        except RowNotFoundError:
            return write_json(HTTPStatus.NOT_FOUND, {"error": "workout does not exist"})
        except Exception:
            return write_json(HTTPStatus.INTERNAL_SERVER_ERROR, {"error": "internal server error"})
        if owner != user.id:
            return write_json(
                HTTPStatus.FORBIDDEN,
                {"error": f"you are not authorized to {action} this workout"},
            )
        return None

    def handle_get_workout_by_id(self, request: Request) -> Response:
        """Return the workout named by the ``id`` path parameter."""
        try:
            workout_id = read_id_param(request)
        except InvalidIDError as exc:
            self._logger.error("ERROR: readIDParam: %s", exc)
            return write_json(HTTPStatus.BAD_REQUEST, {"error": "invalid workout id"})

        try:
            workout = self._workout_store.get_workout_by_id(workout_id)
        except Exception as exc:
            self._logger.error("ERROR: getWorkoutByID: %s", exc)
            return write_json(HTTPStatus.INTERNAL_SERVER_ERROR, {"error": "internal server error"})

        return write_json(HTTPStatus.OK, {"workout": workout})

    def handle_create_workout(self, request: Request) -> Response:
        """Create a workout owned by the logged-in user."""
        try:
            payload = _decode_body(request)
            workout = Workout() if payload is None else Workout.from_dict(payload)
        except ValueError as exc:
            self._logger.error("ERROR: decodingCreateWorkout: %s", exc)
            return write_json(HTTPStatus.BAD_REQUEST, {"error": "invalid request sent"})

        user = _logged_in_user(request)
        if user is None:
            return _must_log_in()

        workout.user_id = user.id

        try:
            created = self._workout_store.create_workout(workout)
        except Exception as exc:
            self._logger.error("ERROR: createWorkout: %s", exc)
            return write_json(HTTPStatus.INTERNAL_SERVER_ERROR, {"error": "failed to create workout"})

        return write_json(HTTPStatus.CREATED, {"workout": created})

    def handle_update_workout_by_id(self, request: Request) -> Response:
        """Apply the supplied fields to a workout owned by the logged-in user."""
        try:
            workout_id = read_id_param(request)
        except InvalidIDError as exc:
            self._logger.error("ERROR: readIDParam: %s", exc)
            return write_json(HTTPStatus.BAD_REQUEST, {"error": "invalid workout update id"})

        try:
            existing = self._workout_store.get_workout_by_id(workout_id)
        except Exception as exc:
            self._logger.error("ERROR: getWorkoutByID: %s", exc)
            return write_json(HTTPStatus.INTERNAL_SERVER_ERROR, {"error": "failed to fetch workout"})

        if existing is None:
            self._logger.error("ERROR: getWorkoutByID: no workout with id %d", workout_id)
            return write_json(HTTPStatus.INTERNAL_SERVER_ERROR, {"error": "internal server error"})

        try:
            changes = _parse_update(_decode_body(request))
        except ValueError as exc:
            self._logger.error("ERROR: decodingUpdate: %s", exc)
            return write_json(HTTPStatus.BAD_REQUEST, {"error": "invalid request"})

        for name, value in changes.items():
            setattr(existing, name, value)

        user = _logged_in_user(request)
        if user is None:
            return _must_log_in()

        refusal = self._ownership_error(workout_id, user, "update")
        if refusal is not None:
            return refusal

        try:
            self._workout_store.update_workout(existing)
        except Exception as exc:
            self._logger.error("ERROR: updatingWorkout: %s", exc)
            return write_json(
                HTTPStatus.INTERNAL_SERVER_ERROR, {"error": "failed to update the workout"}
            )

        return write_json(HTTPStatus.OK, {"workout": existing})

    def handle_delete_workout_by_id(self, request: Request) -> Response:
        """Delete a workout owned by the logged-in user."""
        try:
            workout_id = read_id_param(request)
        except InvalidIDError as exc:
            self._logger.error("ERROR: readIDParam: %s", exc)
            return write_json(HTTPStatus.BAD_REQUEST, {"error": "invalid workout update id"})

        user = _logged_in_user(request)
        if user is None:
            return _must_log_in()

        refusal = self._ownership_error(workout_id, user, "delete")
        if refusal is not None:
            return refusal

        try:
            self._workout_store.delete_workout(workout_id)
        except RowNotFoundError as exc:
            self._logger.error("ERROR: deletingWorkout: %s", exc)
            return write_json(HTTPStatus.NOT_FOUND, {"error": "workout does not exist"})
        except Exception as exc:
            self._logger.error("ERROR: deletingWorkout: %s", exc)
            return write_json(HTTPStatus.INTERNAL_SERVER_ERROR, {"error": "internal server error"})

        return Response(status=HTTPStatus.NO_CONTENT)