"""WSGI API server for registering users and signing them in."""

__version__ = "0.1.0"