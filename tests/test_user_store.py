import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from femtrack.tokens import SCOPE_AUTH, generate_token
from femtrack.user_store import (
    ANONYMOUS_USER,
    Password,
    RowNotFoundError,
    SQLUserStore,
    User,
)

SCHEMA = """
CREATE TABLE users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    username TEXT UNIQUE NOT NULL,
    email TEXT UNIQUE NOT NULL,
    password_hash BLOB NOT NULL,
    bio TEXT,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
CREATE TABLE tokens (
    hash BLOB PRIMARY KEY,
    user_id INTEGER NOT NULL,
    expiry TEXT NOT NULL,
    scope TEXT NOT NULL
);
"""


@pytest.fixture(scope="module")
def hashed():
    pw = Password()
    pw.set("password")
    return pw


@pytest.fixture
def db():
    conn = sqlite3.connect(":memory:")
    conn.executescript(SCHEMA)
    yield conn
    conn.close()


@pytest.fixture
def store(db):
    return SQLUserStore(db)


def _user(hashed, name="alice"):
    return User(username=name, email=f"{name}@example.com", password_hash=hashed, bio="hi")


def _insert_token(db, token):
    db.execute(
        "INSERT INTO tokens (hash, user_id, expiry, scope) VALUES (?, ?, ?, ?)",
        (token.hash, token.user_id, token.expiry.astimezone(timezone.utc).isoformat(timespec="microseconds"), token.scope),
    )
    db.commit()


def test_password_matches(hashed):
    assert hashed.matches("password") is True
    assert hashed.matches("secret") is False
    assert hashed.plain_text == "password"


def test_password_without_hash_raises():
    with pytest.raises(ValueError):
        Password().matches("password")


def test_overlong_password_is_not_set():
    pw = Password()
    pw.set("x" * 73)
    assert pw.hash == b""
    assert pw.plain_text is None


def test_anonymous_user_identity():
    assert ANONYMOUS_USER.is_anonymous() is True
    assert User().is_anonymous() is False


def test_to_dict_hides_password(hashed):
    created = datetime(2030, 1, 1, tzinfo=timezone.utc)
    user = User(id=4, username="bob", email="bob@example.com", password_hash=hashed, bio="b", created_at=created)
    data = user.to_dict()
    assert set(data) == {"id", "username", "email", "bio", "created_at", "updated_at"}
    assert data["created_at"] == created.isoformat()
    assert data["updated_at"] is None


def test_create_and_fetch_user(store, hashed):
    user = _user(hashed)
    store.create_user(user)
    assert user.id > 0
    assert isinstance(user.created_at, datetime)
    fetched = store.get_user_by_username("alice")
    assert fetched.id == user.id
    assert fetched.email == "alice@example.com"
    assert fetched.bio == "hi"
    assert fetched.password_hash.matches("password") is True


def test_duplicate_username_rejected(store, hashed):
    store.create_user(_user(hashed))
    with pytest.raises(sqlite3.IntegrityError):
        store.create_user(User(username="alice", email="other@example.com", password_hash=hashed))


def test_missing_user_is_none(store):
    assert store.get_user_by_username("nobody") is None


def test_update_user(store, hashed):
    user = _user(hashed)
    store.create_user(user)
    user.bio = "updated"
    user.email = "new@example.com"
    store.update_user(user)
    fetched = store.get_user_by_username("alice")
    assert fetched.bio == "updated"
    assert fetched.email == "new@example.com"


def test_update_missing_user_raises(store, hashed):
    with pytest.raises(RowNotFoundError):
        store.update_user(User(id=999, username="ghost", email="ghost@example.com"))


def test_get_user_token_valid(store, db, hashed):
    user = _user(hashed)
    store.create_user(user)
    token = generate_token(user.id, timedelta(hours=1), SCOPE_AUTH)
    _insert_token(db, token)
    found = store.get_user_token(SCOPE_AUTH, token.plaintext)
    assert found.id == user.id
    assert found.username == "alice"


def test_get_user_token_expired_wrong_scope_or_unknown(store, db, hashed):
    user = _user(hashed)
    store.create_user(user)
    expired = generate_token(user.id, timedelta(hours=-1), SCOPE_AUTH)
    _insert_token(db, expired)
    valid = generate_token(user.id, timedelta(hours=1), SCOPE_AUTH)
    _insert_token(db, valid)
    assert store.get_user_token(SCOPE_AUTH, expired.plaintext) is None
    assert store.get_user_token("other", valid.plaintext) is None
    assert store.get_user_token(SCOPE_AUTH, "token") is None