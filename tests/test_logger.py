import logging

from mnstr.logger import Logger


def inner_app(environ, start_response):
    start_response("200 OK", [("Content-Type", "text/plain")])
    return [b"inner:" + environ["PATH_INFO"].encode()]


def run(app, environ):
    captured = {}

    def start_response(status, headers, exc_info=None):
        captured["status"] = status

    body = b"".join(app(environ, start_response))
    return captured["status"], body


def test_passes_request_through(caplog):
    app = Logger(inner_app)
    status, body = run(app, {"REQUEST_METHOD": "GET", "PATH_INFO": "/api/users/"})
    assert status == "200 OK"
    assert body == b"inner:/api/users/"


def test_logs_method_and_uri(caplog):
    caplog.set_level(logging.INFO, logger="mnstr.requests")
    app = Logger(inner_app)
    run(app, {"REQUEST_METHOD": "post", "PATH_INFO": "/api/auth/", "QUERY_STRING": "a=1"})
    assert caplog.messages == ["[POST] /api/auth/?a=1"]


def test_prefers_raw_request_uri(caplog):
    caplog.set_level(logging.INFO, logger="mnstr.requests")
    app = Logger(inner_app)
    run(app, {"REQUEST_METHOD": "DELETE", "PATH_INFO": "/x", "REQUEST_URI": "/raw%20path"})
    assert caplog.messages == ["[DELETE] /raw%20path"]