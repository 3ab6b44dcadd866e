import json
import logging
import sqlite3
from http import HTTPStatus

import bcrypt
import pytest
from werkzeug.test import Client

from femtrack.app import Application
from femtrack.routes import setup_routes
from femtrack.user_store import Password, User

SCHEMA = """
CREATE TABLE users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    username TEXT UNIQUE NOT NULL,
    email TEXT NOT NULL,
    password_hash BLOB NOT NULL,
    bio TEXT NOT NULL DEFAULT '',
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);
CREATE TABLE tokens (
    hash BLOB PRIMARY KEY,
    user_id INTEGER NOT NULL,
    expiry TEXT NOT NULL,
    scope TEXT NOT NULL
);
CREATE TABLE workouts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL,
    title TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    duration_minutes INTEGER NOT NULL,
    calories_burned INTEGER NOT NULL DEFAULT 0
);
CREATE TABLE workout_entries (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    workout_id INTEGER NOT NULL,
    exercise_name TEXT NOT NULL,
    sets INTEGER NOT NULL,
    reps INTEGER,
    duration_seconds INTEGER,
    weight REAL,
    notes TEXT NOT NULL DEFAULT '',
    order_index INTEGER NOT NULL
);
"""


@pytest.fixture
def app():
    conn = sqlite3.connect(":memory:")
    conn.executescript(SCHEMA)
    application = Application(conn, logger=logging.getLogger("test-routes"))
    hashed = bcrypt.hashpw(b"password", bcrypt.gensalt(4))
    application.user_store.create_user(
        User(username="alice", email="alice@example.com", password_hash=Password(hash=hashed))
    )
    yield application
    conn.close()


@pytest.fixture
def client(app):
    return Client(setup_routes(app))


def body_of(response):
    return json.loads(response.get_data(as_text=True))


def login(client):
    password = "password"
    response = client.post("/tokens/authentication", json={"username": "alice", "password": password})
    assert response.status_code == HTTPStatus.CREATED
    return {"Authorization": "Bearer " + body_of(response)["auth_token"]["token"]}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == HTTPStatus.OK
    assert response.get_data(as_text=True) == "Status is available\n"


def test_unknown_path_is_not_found(client):
    response = client.get("/nowhere")
    assert response.status_code == HTTPStatus.NOT_FOUND
    assert response.get_data(as_text=True) == "404 page not found\n"


def test_wrong_method_is_not_allowed(client):
    response = client.post("/health")
    assert response.status_code == HTTPStatus.METHOD_NOT_ALLOWED
    assert "GET" in response.headers.get("Allow", "")


def test_workouts_require_login(client):
    response = client.get("/workouts/1")
    assert response.status_code == HTTPStatus.UNAUTHORIZED
    assert body_of(response) == {"error": "you must be logged in to access this route"}
    assert response.headers.get("Vary") == "Authorization"


def test_bad_authorization_header(client):
    response = client.get("/workouts/1", headers={"Authorization": "Token token"})
    assert response.status_code == HTTPStatus.UNAUTHORIZED
    assert body_of(response) == {"error": "invalid authorization header"}


def test_full_workout_lifecycle(client, app):
    headers = login(client)
    alice = app.user_store.get_user_by_username("alice")

    created = client.post(
        "/workouts",
        headers=headers,
        json={"title": "Swim", "duration_minutes": 40, "entries": []},
    )
    assert created.status_code == HTTPStatus.CREATED
    workout = body_of(created)["workout"]
    assert workout["user_id"] == alice.id
    path = f"/workouts/{workout['id']}"

    fetched = client.get(path, headers=headers)
    assert fetched.status_code == HTTPStatus.OK
    assert body_of(fetched)["workout"]["title"] == "Swim"

    updated = client.put(path, headers=headers, json={"title": "Long swim"})
    assert updated.status_code == HTTPStatus.OK
    assert body_of(client.get(path, headers=headers))["workout"]["title"] == "Long swim"

    deleted = client.delete(path, headers=headers)
    assert deleted.status_code == HTTPStatus.NO_CONTENT
    assert body_of(client.get(path, headers=headers))["workout"] is None


def test_invalid_id_in_path(client):
    headers = login(client)
    response = client.get("/workouts/abc", headers=headers)
    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert body_of(response) == {"error": "invalid workout id"}