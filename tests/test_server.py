import io

import pytest

from mnstr.database import DATABASE_URL_ENV
from mnstr.server import HOST_ENV, PORT_ENV, Settings, SettingsError, create_app, main, parse_settings

FULL_ENV = {HOST_ENV: "localhost", PORT_ENV: "8080", DATABASE_URL_ENV: "sqlite:///mnstr.sqlite"}


def call(app, method, path, query=""):
    captured = {}

    def start_response(status, headers, exc_info=None):
        captured["status"] = status
        captured["headers"] = dict(headers)

    environ = {
        "REQUEST_METHOD": method,
        "PATH_INFO": path,
        "QUERY_STRING": query,
        "CONTENT_LENGTH": "0",
        "wsgi.input": io.BytesIO(b""),
    }
    data = b"".join(app(environ, start_response))
    return captured["status"], captured["headers"], data


def test_settings_from_environment():
    settings = parse_settings([], FULL_ENV)
    assert settings == Settings(host="localhost", port=8080, database_url="sqlite:///mnstr.sqlite")


def test_flags_override_environment():
    settings = parse_settings(["-host", "0.0.0.0", "--port", "9090", "-dburl", "sqlite://"], FULL_ENV)
    assert settings == Settings(host="0.0.0.0", port=9090, database_url="sqlite://")


def test_invalid_port_in_environment():
    env = dict(FULL_ENV, **{PORT_ENV: "eighty"})
    with pytest.raises(SettingsError, match="MNSTR_PORT is not a valid integer"):
        parse_settings([], env)


@pytest.mark.parametrize(
    "missing, message",
    [(HOST_ENV, "MNSTR_HOST is not set"), (PORT_ENV, "MNSTR_PORT is not set"),
     (DATABASE_URL_ENV, "MNSTR_DATABASE_URL is not set")],
)
def test_missing_setting(missing, message):
    env = {key: value for key, value in FULL_ENV.items() if key != missing}
    with pytest.raises(SettingsError, match=message):
        parse_settings([], env)


def test_flag_supplies_missing_value():
    env = {key: value for key, value in FULL_ENV.items() if key != HOST_ENV}
    assert parse_settings(["-host", "example.com"], env).host == "example.com"


def test_unknown_path_is_not_found():
    status, headers, data = call(create_app(), "GET", "/elsewhere")
    assert status.startswith("404")
    assert data == b"404 page not found\n"
    assert headers["X-Content-Type-Options"] == "nosniff"


def test_route_without_slash_redirects():
    status, headers, _ = call(create_app(), "POST", "/api/users", "x=1")
    assert status.startswith("301")
    assert headers["Location"] == "/api/users/?x=1"


@pytest.mark.parametrize("path", ["/api/auth/", "/api/users/login"])
def test_routes_reach_handlers(path):
    status, _, data = call(create_app(), "GET", path)
    assert status.startswith("404")
    assert data == b"Route not found"


def test_main_fails_without_configuration(monkeypatch):
    for name in (HOST_ENV, PORT_ENV, DATABASE_URL_ENV):
        monkeypatch.delenv(name, raising=False)
    assert main([]) == 1


def test_main_fails_with_bad_port(monkeypatch):
    monkeypatch.setenv(PORT_ENV, "eighty")
    assert main([]) == 1