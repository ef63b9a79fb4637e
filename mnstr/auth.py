"""Login and logout endpoints."""

from __future__ import annotations

import json
from http import HTTPStatus

from mnstr.database import DatabaseError
from mnstr.models import Session, User, UserNotFound, find_user_by_id, log_in


def _read_body(environ):
    try:
        length = int(environ.get("CONTENT_LENGTH") or 0)
    except ValueError:
        length = 0
    stream = environ.get("wsgi.input")
    return stream.read(length) if stream is not None and length > 0 else b""


def _decode_object(body, what):
    """Decode the first JSON value of ``body`` as an object; null gives an empty one."""
    content = body.decode("utf-8", errors="replace").lstrip()
    if not content:
        raise ValueError("EOF")
    value, _ = json.JSONDecoder().raw_decode(content)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"cannot decode {type(value).__name__} into {what}")
    return value


def _string_field(data, key):
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string")
    return value or ""


def _send_json(start_response, payload, status):
    body = json.dumps(payload, separators=(",", ":"), ensure_ascii=False) + "\n"
    start_response("200 OK", [("Content-Type", "application/json"), ("Status", str(int(status)))])
    return [body.encode("utf-8")]


def _empty(start_response):
    start_response("200 OK", [("Content-Length", "0")])
    return [b""]


def _dispatch(environ, start_response, on_post, on_delete):
    method = environ.get("REQUEST_METHOD", "")
    if method in ("GET", "PATCH", "PUT"):
        start_response("404 Not Found", [("Content-Type", "text/plain; charset=utf-8")])
        return [b"Route not found"]
    handler = {"POST": on_post, "DELETE": on_delete}.get(method, lambda _e, sr: _empty(sr))
    return handler(environ, start_response)


def _login_payload(error="", session=None, user=None):
    return {
        "error": error,
        "session": (session or Session()).to_dict(),
        "user": json.loads((user or User()).to_json()),
    }


def handle_login(environ, start_response):
    """Log a user in from a JSON body holding email and password."""
    try:
        request = _decode_object(_read_body(environ), "a login request")
        email, password = (_string_field(request, key) for key in ("email", "password"))
    except ValueError as exc:
        return _send_json(start_response, _login_payload(str(exc)), HTTPStatus.BAD_REQUEST)
    try:
        session = log_in(email, password)
        user = find_user_by_id(session.user_id)
    except (DatabaseError, UserNotFound, ValueError) as exc:
        return _send_json(start_response, _login_payload(str(exc)), HTTPStatus.INTERNAL_SERVER_ERROR)
    return _send_json(start_response, _login_payload("", session, user), HTTPStatus.OK)


def handle_logout(environ, start_response):
    """Answer a logout request with an empty response."""
    return _empty(start_response)


class AuthHandler:
    """Dispatch requests under the auth route by method."""

    def __call__(self, environ, start_response):
        return _dispatch(environ, start_response, handle_login, handle_logout)