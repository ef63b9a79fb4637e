"""Users and sessions."""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

import bcrypt
from sqlalchemy import text

from mnstr.database import connection

BCRYPT_DEFAULT_COST = 10
PASSWORD_MAX_BYTES = 72
ZERO_TIME = "0001-01-01T00:00:00Z"

_USER_COLUMNS = "id, display_name, email, password_hash, qr_code, created_at, updated_at"


class UserNotFound(LookupError):
    """Raised when no user matches a lookup."""

    def __str__(self) -> str:
        return "user not found"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _password_bytes(password: str) -> bytes:
    raw = password.encode("utf-8")
    if len(raw) > PASSWORD_MAX_BYTES:
        raise ValueError("bcrypt: password length exceeds 72 bytes")
    return raw


def _as_datetime(value: object) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def _format_time(moment: datetime | None) -> str:
    if moment is None:
        return ZERO_TIME
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    stamp = moment.isoformat()
    if stamp.endswith("+00:00"):
        stamp = stamp[: -len("+00:00")] + "Z"
    return stamp


@dataclass
class User:
    """A registered player."""

    id: str = ""
    display_name: str = ""
    email: str = ""
    password: str = field(default="", repr=False)
    qr_code: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    archived_at: datetime | None = None

    def to_json(self) -> bytes:
        """Serialise the public fields of the user."""
        public = {"id": self.id, "displayName": self.display_name}
        return json.dumps(public, separators=(",", ":"), ensure_ascii=False).encode("utf-8")

    def validate(self) -> None:
        """Raise ValueError when a required field is empty."""
        if not self.email:
            raise ValueError("email is required")
        if not self.password:
            raise ValueError("password is required")
        if not self.qr_code:
            raise ValueError("qr code is required")

    def hash_password(self) -> str:
        """Return a bcrypt hash of the user's password."""
        salt = bcrypt.gensalt(rounds=BCRYPT_DEFAULT_COST)
        return bcrypt.hashpw(_password_bytes(self.password), salt).decode("ascii")

    def create(self) -> None:
        """Insert the user, storing the hashed password."""
        hashed = self.hash_password()
        with connection() as db:
            db.execute(
                text(
                    "INSERT INTO users (id, display_name, email, password_hash, qr_code, "
                    "created_at, updated_at) VALUES (:id, :display_name, :email, "
                    ":password_hash, :qr_code, :created_at, :updated_at)"
                ),
                {
                    "id": self.id,
                    "display_name": self.display_name,
                    "email": self.email,
                    "password_hash": hashed,
                    "qr_code": self.qr_code,
                    "created_at": self.created_at,
                    "updated_at": self.updated_at,
                },
            )


def new_user(display_name: str, email: str, password: str, qr_code: str) -> User:
    """Build a user with a fresh identifier and current timestamps."""
    now = _now()
    return User(
        id=str(uuid.uuid4()),
        display_name=display_name,
        email=email,
        password=password,
        qr_code=qr_code,
        created_at=now,
        updated_at=now,
    )


def from_json(data: bytes | str) -> User:
    """Build a user from its JSON form; only public fields are read."""
    decoded = json.loads(data)
    user = User()
    if decoded is None:
        return user
    if not isinstance(decoded, dict):
        raise ValueError(f"cannot decode {type(decoded).__name__} into a user")
    for key, attribute in (("id", "id"), ("displayName", "display_name")):
        value = decoded.get(key)
        if value is None:
            continue
        if not isinstance(value, str):
            raise ValueError(f"field {key!r} must be a string")
        setattr(user, attribute, value)
    return user


def _row_to_user(row) -> User:
    return User(
        id=row["id"],
        display_name=row["display_name"] or "",
        email=row["email"] or "",
        password=row["password_hash"] or "",
        qr_code=row["qr_code"] or "",
        created_at=_as_datetime(row["created_at"]),
        updated_at=_as_datetime(row["updated_at"]),
    )


def find_user_by_id(user_id: str) -> User:
    """Return the user with the given identifier or raise UserNotFound."""
    with connection() as db:
        row = db.execute(
            text(f"SELECT {_USER_COLUMNS} FROM users WHERE id = :id"), {"id": user_id}
        ).mappings().first()
    if row is None or not row["id"]:
        raise UserNotFound()
    return _row_to_user(row)


@dataclass
class Session:
    """A login session."""

    id: str = ""
    user_id: str = ""
    token: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    archived_at: datetime | None = None
    expires_at: datetime | None = None

    def to_dict(self) -> dict[str, str]:
        """Return the public fields of the session."""
        return {
            "user_id": self.user_id,
            "token": self.token,
            "expires_at": _format_time(self.expires_at),
        }


def log_in(email: str, password: str) -> Session:
    """Check the credentials and return a new session for the user."""
    candidate = _password_bytes(password)
    with connection() as db:
        row = db.execute(
            text(f"SELECT {_USER_COLUMNS} FROM users WHERE email = :email"), {"email": email}
        ).mappings().first()
    if row is None or not row["id"] or not row["password_hash"]:
        raise UserNotFound()
    try:
        matches = bcrypt.checkpw(candidate, row["password_hash"].encode("utf-8"))
    except ValueError:
        matches = False
    if not matches:
        raise UserNotFound()
    return Session(user_id=row["id"], token=str(uuid.uuid4()))


def logout(session_id: str) -> None:
    """Archive the session with the given identifier."""
    with connection() as db:
        db.execute(
            text("UPDATE sessions SET archived_at = :archived_at WHERE id = :id"),
            {"archived_at": _now(), "id": session_id},
        )