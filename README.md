# femtrack

femtrack is a small HTTP API for recording workouts, built as a WSGI
application on Werkzeug. Users exchange their username and password for a
bearer token and then create, read, update and delete their own workouts.

## Endpoints

| Method | Path                     | Auth required | Purpose                           |
|--------|--------------------------|---------------|-----------------------------------|
| GET    | `/health`                | no            | Liveness check (plain text)       |
| POST   | `/tokens/authentication` | no            | Create an authentication token    |
| POST   | `/workouts`              | yes           | Create a workout with its entries |
| GET    | `/workouts/<id>`         | yes           | Fetch a workout and its entries   |
| PUT    | `/workouts/<id>`         | yes           | Update a workout you own          |
| DELETE | `/workouts/<id>`         | yes           | Delete a workout you own          |

Authenticated routes expect a header of the form:

    Authorization: Bearer token

Every response from these routes carries `Vary: Authorization`. A request
without an `Authorization` header is treated as anonymous and refused with
`401`. A malformed header, or a token that is unknown or expired, is also
answered with `401`. Unknown paths get `404`; a known path with the wrong
method gets `405` with an `Allow` header.

Error responses are JSON objects of the form `{"error": "..."}`, indented
by one space and followed by a newline.

## Tokens

`POST /tokens/authentication` takes a JSON body with `username` and
`password` fields. On success it answers `201` with an `auth_token` object
holding the plaintext `token` and its ISO 8601 `expiry`. Tokens are 32
random bytes in unpadded base32, live for 24 hours and carry the
`authentication` scope (`femtrack.tokens.SCOPE_AUTH`). Only the SHA-256
hash of each token is stored. A wrong password is answered with `401`;
an unknown username with `500`.

## Workouts

A workout has a `title`, `description`, `duration_minutes`,
`calories_burned` and a list of `entries`. Each entry has an
`exercise_name`, `sets`, optional `reps`, `duration_seconds` and `weight`,
`notes` and an `order_index`; entries come back sorted by `order_index`.
A new workout is owned by the user who created it.

On update, any top-level field left out or sent as `null` keeps its current
value; sending `entries` replaces the whole list. Only the owner of a
workout may update or delete it (`403` otherwise, which is also the answer
for a workout that does not exist). A successful delete answers `204`.

## Storage

The stores (`SQLUserStore`, `SQLTokenStore`, `SQLWorkoutStore`) work over
any DB-API connection that uses `?` placeholders and provides
`cursor.lastrowid` and `cursor.rowcount`, such as `sqlite3`. They expect
these tables:

```sql
CREATE TABLE users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    username TEXT UNIQUE NOT NULL,
    email TEXT NOT NULL,
    password_hash BLOB NOT NULL,
    bio TEXT,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);
CREATE TABLE tokens (
    hash BLOB PRIMARY KEY,
    user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    expiry TEXT NOT NULL,
    scope TEXT NOT NULL
);
CREATE TABLE workouts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL REFERENCES users(id),
    title TEXT NOT NULL,
    description TEXT,
    duration_minutes INTEGER NOT NULL,
    calories_burned INTEGER
);
CREATE TABLE workout_entries (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    workout_id INTEGER NOT NULL REFERENCES workouts(id) ON DELETE CASCADE,
    exercise_name TEXT NOT NULL,
    sets INTEGER NOT NULL,
    reps INTEGER,
    duration_seconds INTEGER,
    weight REAL,
    notes TEXT,
    order_index INTEGER NOT NULL
);
```

Passwords are hashed with bcrypt (cost 12) by `Password.set`.

## Using it from Python

```python
import sqlite3
from wsgiref.simple_server import make_server

from femtrack.app import Application
from femtrack.routes import setup_routes
from femtrack.user_store import User

db = sqlite3.connect("femtrack.db", check_same_thread=False)
# ... create the tables shown above ...

app = Application(db)

user = User(username="alice", email="alice@example.com")
user.password_hash.set("password")
app.user_store.create_user(user)

router = setup_routes(app)  # a WSGI callable
make_server("", 8080, router).serve_forever()
```

`Application` takes the connection and an optional `logging.Logger`; by
default it logs to standard output under the name `femtrack`.

## What it does not do

- There is no HTTP route for registering users; add them from Python with
  `SQLUserStore.create_user`.
- It does not create or migrate the database schema; the tables must exist
  before the stores are used.
- It ships no server or command-line program; hand the `Router` returned by
  `setup_routes` to a WSGI server of your choice.