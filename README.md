# mnstr

A small WSGI application that serves a JSON API for registering users and
signing them in. User records live in a SQL database reached through
SQLAlchemy, and passwords are stored as bcrypt hashes.

## Installing

```
pip install .
```

The database is reached through an SQLAlchemy URL. Install the driver your
database needs alongside the package; SQLite works without an extra driver.

## Running the server

The `mnstr` command starts a server from the standard library's `wsgiref`.
It needs a host, a port and a database URL, taken from the environment:

| Variable             | Meaning                   |
|----------------------|---------------------------|
| `MNSTR_HOST`         | address to listen on      |
| `MNSTR_PORT`         | port to listen on         |
| `MNSTR_DATABASE_URL` | SQLAlchemy database URL   |

Each one can be overridden on the command line with `--host`, `--port` and
`--dburl` (the single-dash forms `-host`, `-port` and `-dburl` work too):

```
mnstr --host 127.0.0.1 --port 8080 --dburl sqlite:///mnstr.db
```

If any of the three values is missing, or `MNSTR_PORT` is not an integer,
the command logs the problem and exits with status 1. It also exits with
status 1 if the address cannot be bound. Each request is logged as
`[METHOD] /path`.

The database must already hold a `users` table with the columns `id`,
`display_name`, `email`, `password_hash`, `qr_code`, `created_at` and
`updated_at`, and a `sessions` table with at least `id` and `archived_at`.

## API

Paths outside the two routes below get `404 page not found`. Both routes
answer `GET`, `PATCH` and `PUT` with `404 Route not found`, and any method
other than those, `POST` and `DELETE` with an empty reply.

### `/api/users/`

`POST` registers a user from a JSON body:

```
curl -X POST http://127.0.0.1:8080/api/users/ \
  -d '{"displayName": "Player", "email": "player@example.com", "password": "password", "qrCode": "qr"}'
```

The reply is JSON with the fields `error`, `user` (holding `id` and
`displayName`) and `qrCode` (always empty). On failure, `error` holds the
message. A body that is not a JSON object, or a field that is not a string,
gives status 400; a database failure or a password longer than 72 bytes
gives status 500.

`DELETE` is accepted and answers with an empty reply.

### `/api/auth/`

`POST` signs a user in with `email` and `password`. The password is checked
against the stored bcrypt hash. The reply is JSON with the fields `error`,
`session` (holding `user_id`, `token` and `expires_at`) and `user`. Unknown
users and wrong passwords give status 500 with `error` set to
`user not found`.

`DELETE` is accepted and answers with an empty reply.

JSON replies are sent with HTTP status `200 OK`; the intended status
(`200`, `400` or `500`) is carried in a `Status` header next to
`Content-Type: application/json`.

## Using it from Python

`mnstr.server.create_app()` returns the WSGI application, so it can be
mounted under any WSGI server. It reads the database URL from
`MNSTR_DATABASE_URL`. `mnstr.server.parse_settings(argv, env)` returns the
`Settings` the command would use, or raises `SettingsError`.

The models can be used directly:

```python
from mnstr.models import new_user, find_user_by_id

user = new_user("Player", "player@example.com", "password", "qr")
user.validate()
user.create()
print(find_user_by_id(user.id).to_json())
```

`mnstr.models.log_in(email, password)` returns a `Session`, and
`mnstr.models.logout(session_id)` sets `archived_at` on a row of the
`sessions` table. `mnstr.database.connection(url)` is a context manager that
yields an SQLAlchemy connection and commits when the block ends; failures are
raised as `DatabaseError`.

## What it does not do

- It does not create or migrate the database tables.
- Sessions returned by a login are not saved, and they carry no expiry:
  `expires_at` is always `0001-01-01T00:00:00Z`.
- The `DELETE` endpoints do not log users out or remove them.
- Registration does not call `User.validate()`, so empty fields are stored
  as given.

## Tests

```
pip install ".[test]"
pytest
```