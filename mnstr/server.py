"""Server configuration, routing and entry point."""

from __future__ import annotations

import argparse
import logging
import os
from dataclasses import dataclass
from wsgiref.simple_server import make_server

from mnstr.auth import AuthHandler
from mnstr.database import DATABASE_URL_ENV
from mnstr.logger import Logger
from mnstr.users import UsersHandler

log = logging.getLogger("mnstr")

HOST_ENV = "MNSTR_HOST"
PORT_ENV = "MNSTR_PORT"


class SettingsError(ValueError):
    """Raised when the server configuration is incomplete or invalid."""


@dataclass(frozen=True)
class Settings:
    """Where to listen and which database to use."""

    host: str
    port: int
    database_url: str


def parse_settings(argv=None, env=None):
    """Read settings from the environment; command-line flags override them."""
    env = os.environ if env is None else env
    try:
        port = int(env.get(PORT_ENV) or 0)
    except ValueError:
        raise SettingsError(f"{PORT_ENV} is not a valid integer") from None

    parser = argparse.ArgumentParser(prog="mnstr")
    parser.add_argument("-host", "--host", default=env.get(HOST_ENV, ""), help="Host for server")
    parser.add_argument("-port", "--port", type=int, default=port, help="Port for server")
    parser.add_argument("-dburl", "--dburl", default=env.get(DATABASE_URL_ENV, ""), help="URL for database")
    args = parser.parse_args(argv)

    for value, name in ((args.host, HOST_ENV), (args.port, PORT_ENV), (args.dburl, DATABASE_URL_ENV)):
        if not value:
            raise SettingsError(f"{name} is not set")
    return Settings(args.host, args.port, args.dburl)


def create_app():
    """Build the WSGI application with the auth and users routes."""
    routes = {"/api/auth/": Logger(AuthHandler()), "/api/users/": Logger(UsersHandler())}

    def app(environ, start_response):
        path = environ.get("PATH_INFO") or "/"
        for prefix, handler in routes.items():
            if path.startswith(prefix):
                return handler(environ, start_response)
        start_response("404 Not Found", [("Content-Type", "text/plain; charset=utf-8")])
        return [b"404 page not found\n"]

    return app


def main(argv=None):
    """Start the server; returns a non-zero status when it cannot."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    try:
        settings = parse_settings(argv)
    except SettingsError as exc:
        log.error("%s", exc)
        return 1

    os.environ.update({HOST_ENV: settings.host, PORT_ENV: str(settings.port), DATABASE_URL_ENV: settings.database_url})
    log.info("Serving mnstr at %s:%d", settings.host, settings.port)
    try:
        with make_server(settings.host, settings.port, create_app()) as httpd:
            httpd.serve_forever()
    except OSError as exc:
        log.error("%s", exc)
        return 1
    except KeyboardInterrupt:
        pass
    return 0