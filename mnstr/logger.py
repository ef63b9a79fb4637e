"""Request logging middleware."""

from __future__ import annotations

import logging
from urllib.parse import quote

log = logging.getLogger("mnstr.requests")


class Logger:
    """WSGI middleware that logs each request's method and URI."""

    def __init__(self, app):
        self.next = app

    def __call__(self, environ, start_response):
        uri = environ.get("REQUEST_URI") or quote(environ.get("SCRIPT_NAME", "") + environ.get("PATH_INFO", ""))
        if "REQUEST_URI" not in environ and environ.get("QUERY_STRING"):
            uri += "?" + environ["QUERY_STRING"]
        log.info("[%s] %s", environ.get("REQUEST_METHOD", "").upper(), uri)
        return self.next(environ, start_response)