"""Database connections."""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

DATABASE_URL_ENV = "MNSTR_DATABASE_URL"


class DatabaseError(Exception):
    """Raised when the database cannot be reached or a statement fails."""


@contextmanager
def connection(url: str | None = None) -> Iterator[Connection]:
    """Connect to ``url`` or MNSTR_DATABASE_URL, committing on success."""
    url = url or os.environ.get(DATABASE_URL_ENV)
    if not url:
        raise DatabaseError(f"{DATABASE_URL_ENV} is not set")
    try:
        engine = create_engine(url)
        with engine.connect() as conn:
            yield conn
            conn.commit()
        engine.dispose()
    except (SQLAlchemyError, ImportError) as exc:
        raise DatabaseError(str(exc)) from exc