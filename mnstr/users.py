"""Registration endpoints."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable
from http import HTTPStatus

from mnstr.auth import _decode_object, _dispatch, _empty, _read_body, _send_json, _string_field
from mnstr.database import DatabaseError
from mnstr.models import User, new_user

log = logging.getLogger("mnstr.users")


def _register_payload(error: str = "", user: User | None = None) -> dict:
    return {"error": error, "user": json.loads((user or User()).to_json()), "qrCode": ""}


def handle_register(environ: dict, start_response: Callable) -> Iterable[bytes]:
    """Create a user from a JSON body."""
    body = _read_body(environ)
    try:
        request = _decode_object(body, "a register request")
        fields = [_string_field(request, key) for key in ("displayName", "email", "password", "qrCode")]
    except ValueError as exc:
        log.info("Error decoding request: %s", exc)
        log.info("Request: %s", body.decode("utf-8", errors="replace"))
        return _send_json(start_response, _register_payload(str(exc)), HTTPStatus.BAD_REQUEST)

    user = new_user(*fields)
    try:
        user.create()
    except (DatabaseError, ValueError) as exc:
        log.info("Error creating user: %s", exc)
        return _send_json(start_response, _register_payload(str(exc)), HTTPStatus.INTERNAL_SERVER_ERROR)
    log.info("User created: %s", user.display_name)
    return _send_json(start_response, _register_payload("", user), HTTPStatus.OK)


def handle_unregister(environ: dict, start_response: Callable) -> Iterable[bytes]:
    """Answer an unregister request with an empty response."""
    return _empty(start_response)


class UsersHandler:
    """Dispatch requests under the users route by method."""

    def __call__(self, environ: dict, start_response: Callable) -> Iterable[bytes]:
        return _dispatch(environ, start_response, handle_register, handle_unregister)