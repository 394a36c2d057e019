"""
Transport abstraction for the request entry point.

The entry point only needs to read the request line and, when the
application cannot answer, write a status and a JSON body. Everything else
is handed to the application untouched through the raw WSGI pair.
"""

import json
from abc import ABC, abstractmethod
from http import HTTPStatus
from typing import Any, Iterable, List, Optional, Tuple

from werkzeug.wsgi import get_current_url

Headers = List[Tuple[str, str]]


class Transport(ABC):
    @property
    @abstractmethod
    def method(self) -> str:
        ...

    @property
    @abstractmethod
    def url(self) -> str:
        ...

    @abstractmethod
    def forward(self, app) -> Iterable[bytes]:
        """Hand the raw request/response pair to a WSGI application."""

    @abstractmethod
    def write_status(self, status: int, headers: Headers, exc_info=None) -> None:
        ...

    def write_json(self, status: int, payload: Any, exc_info=None) -> Iterable[bytes]:
        body = json.dumps(payload).encode("utf-8")
        self.write_status(
            status,
            [("Content-Type", "application/json"), ("Content-Length", str(len(body)))],
            exc_info,
        )
        return [body]


class WsgiTransport(Transport):
    def __init__(self, environ: dict, start_response):
        self.environ = environ
        self._start_response = start_response
        self.started = False

    @property
    def method(self) -> str:
        return self.environ.get("REQUEST_METHOD", "GET")

    @property
    def url(self) -> str:
        return get_current_url(self.environ)

    def start_response(self, status, headers, exc_info=None):
        self.started = True
        return self._start_response(status, headers, exc_info)

    def forward(self, app) -> Iterable[bytes]:
        return app(self.environ, self.start_response)

    def write_status(self, status: int, headers: Headers, exc_info: Optional[tuple] = None) -> None:
        # exc_info is only passed when the app already started a response,
        # which lets the server replace the headers it has not sent yet
        self._start_response(
            f"{status} {HTTPStatus(status).phrase}", headers, exc_info if self.started else None
        )
