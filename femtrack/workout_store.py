"""Workouts, their entries and the SQL-backed workout store."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from femtrack.user_store import RowNotFoundError


def _int_field(data: dict, key: str, default: int | None) -> int | None:
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer")
    return value


def _float_field(data: dict, key: str) -> float | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} must be a number")
    return float(value)


def _str_field(data: dict, key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string")
    return value


@dataclass
class WorkoutEntry:
    id: int = 0
    exercise_name: str = ""
    sets: int = 0
    reps: int | None = None
    duration_seconds: int | None = None
    weight: float | None = None
    notes: str = ""
    order_index: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "exercise_name": self.exercise_name,
            "sets": self.sets,
            "reps": self.reps,
            "duration_seconds": self.duration_seconds,
            "weight": self.weight,
            "notes": self.notes,
            "order_index": self.order_index,
        }

    @classmethod
    def from_dict(cls, data: Any) -> WorkoutEntry:
        """Build an entry from decoded JSON; raise ValueError on bad types."""
        if not isinstance(data, dict):
            raise ValueError("entry must be an object")
        return cls(
            id=_int_field(data, "id", 0),
            exercise_name=_str_field(data, "exercise_name"),
            sets=_int_field(data, "sets", 0),
            reps=_int_field(data, "reps", None),
            duration_seconds=_int_field(data, "duration_seconds", None),
            weight=_float_field(data, "weight"),
            notes=_str_field(data, "notes"),
            order_index=_int_field(data, "order_index", 0),
        )


@dataclass
class Workout:
    id: int = 0
    user_id: int = 0
    title: str = ""
    description: str = ""
    duration_minutes: int = 0
    calories_burned: int = 0
    entries: list[WorkoutEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "description": self.description,
            "duration_minutes": self.duration_minutes,
            "calories_burned": self.calories_burned,
            "entries": [entry.to_dict() for entry in self.entries],
        }

    @classmethod
    def from_dict(cls, data: Any) -> Workout:
        """Build a workout from decoded JSON; raise ValueError on bad types."""
        if not isinstance(data, dict):
            raise ValueError("workout must be an object")
        raw_entries = data.get("entries")
        if raw_entries is None:
            raw_entries = []
        if not isinstance(raw_entries, list):
            raise ValueError("entries must be a list")
        return cls(
            id=_int_field(data, "id", 0),
            user_id=_int_field(data, "user_id", 0),
            title=_str_field(data, "title"),
            description=_str_field(data, "description"),
            duration_minutes=_int_field(data, "duration_minutes", 0),
            calories_burned=_int_field(data, "calories_burned", 0),
            entries=[WorkoutEntry.from_dict(item) for item in raw_entries],
        )


_INSERT_ENTRY = (
    "INSERT INTO workout_entries (workout_id, exercise_name, sets, reps, "
    "duration_seconds, weight, notes, order_index) VALUES (?, ?, ?, ?, ?, ?, ?, ?)"
)


def _entry_params(workout_id: int, entry: WorkoutEntry) -> tuple:
    return (
        workout_id,
        entry.exercise_name,
        entry.sets,
        entry.reps,
        entry.duration_seconds,
        entry.weight,
        entry.notes,
        entry.order_index,
    )


class SQLWorkoutStore:
    """Workout storage over a DB-API connection using ``?`` placeholders."""

    def __init__(self, db: Any) -> None:
        self._db = db

    @contextmanager
    def _transaction(self) -> Iterator[Any]:
        cur = self._db.cursor()
        try:
            yield cur
        except BaseException:
            self._db.rollback()
            raise
        else:
            self._db.commit()
        finally:
            cur.close()

    def create_workout(self, workout: Workout) -> Workout:
        """Insert ``workout`` with its entries in one transaction and set its id."""
        with self._transaction() as cur:
            cur.execute(
                "INSERT INTO workouts (user_id, title, description, duration_minutes, "
                "calories_burned) VALUES (?, ?, ?, ?, ?)",
                (
                    workout.user_id,
                    workout.title,
                    workout.description,
                    workout.duration_minutes,
                    workout.calories_burned,
                ),
            )
            workout.id = cur.lastrowid
            for entry in workout.entries:
                cur.execute(_INSERT_ENTRY, _entry_params(workout.id, entry))
        return workout

    def get_workout_by_id(self, workout_id: int) -> Workout | None:
        """Return the workout with its entries ordered by index, or None."""
        with self._transaction() as cur:
            cur.execute(
                "SELECT id, title, description, duration_minutes, calories_burned "
                "FROM workouts WHERE id = ?",
                (workout_id,),
            )
            row = cur.fetchone()
            if row is None:
                return None
            workout = Workout(
                id=row[0],
                title=row[1],
                description=row[2],
                duration_minutes=row[3],
                calories_burned=row[4],
            )
            cur.execute(
                "SELECT id, exercise_name, sets, reps, duration_seconds, weight, notes, "
                "order_index FROM workout_entries WHERE workout_id = ? ORDER BY order_index",
                (workout_id,),
            )
            workout.entries = [
                WorkoutEntry(
                    id=entry_id,
                    exercise_name=name,
                    sets=sets,
                    reps=reps,
                    duration_seconds=duration,
                    weight=weight,
                    notes=notes,
                    order_index=order_index,
                )
                for entry_id, name, sets, reps, duration, weight, notes, order_index in cur.fetchall()
            ]
        return workout

    def update_workout(self, workout: Workout) -> None:
        """Save fields and replace all entries; raise RowNotFoundError if missing."""
        with self._transaction() as cur:
            cur.execute(
                "UPDATE workouts SET title = ?, description = ?, duration_minutes = ?, "
                "calories_burned = ? WHERE id = ?",
                (
                    workout.title,
                    workout.description,
                    workout.duration_minutes,
                    workout.calories_burned,
                    workout.id,
                ),
            )
            if cur.rowcount == 0:
                print("No data to match")
                raise RowNotFoundError("no workout matched")
            cur.execute("DELETE FROM workout_entries WHERE workout_id = ?", (workout.id,))
            for entry in workout.entries:
                cur.execute(_INSERT_ENTRY, _entry_params(workout.id, entry))

    def delete_workout(self, workout_id: int) -> None:
        """Delete a workout; raise RowNotFoundError if it does not exist."""
        with self._transaction() as cur:
            cur.execute("DELETE FROM workouts WHERE id = ?", (workout_id,))
            if cur.rowcount == 0:
                raise RowNotFoundError("no workout matched")

    def get_workout_owner(self, workout_id: int) -> int:
        """Return the owner's user id, or 0 when it cannot be read."""
        try:
            with self._transaction() as cur:
                cur.execute("SELECT user_id FROM workouts WHERE id = ?", (workout_id,))
                row = cur.fetchone()
        except Exception:
            return 0
        return row[0] if row is not None else 0