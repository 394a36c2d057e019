"""
Request Entry Point

EntryPoint is the WSGI callable handed to gunicorn and, through
asgiref + Mangum, to AWS Lambda. It obtains the application from the
lifecycle (creating it on the first request) and passes the raw WSGI pair to
it unchanged.

Failures never escape: initialization or dispatch errors are returned as
Err and rendered at the outer boundary as

    {"statusCode": 500, "message": "Internal Server Error", "error": "<message>"}

A body that fails while it streams is the exception: the status line has
already gone out, so the error is logged, the body is closed and the
exception is left to the WSGI server.
"""

import logging
import sys
from dataclasses import dataclass, field
from typing import Iterable, Optional, Union

from .lifecycle import ApplicationLifecycle
from .transport import Transport, WsgiTransport

logger = logging.getLogger(__name__)

INTERNAL_SERVER_ERROR = "Internal Server Error"

INITIALIZATION = "initialization"
DISPATCH = "dispatch"


@dataclass(frozen=True)
class Ok:
    body: Iterable[bytes]


@dataclass(frozen=True)
class Err:
    kind: str
    message: str
    exc_info: Optional[tuple] = field(default=None, repr=False, compare=False)


Result = Union[Ok, Err]


def error_payload(message: str) -> dict:
    return {"statusCode": 500, "message": INTERNAL_SERVER_ERROR, "error": message}


class LoggedBody:
    """Response iterable that logs failures raised while it is consumed."""

    def __init__(self, body: Iterable[bytes], url: str):
        self.body = body
        self.url = url
        self.closed = False

    def __iter__(self):
        try:
            yield from self.body
        except Exception as e:
            logger.error(f"Response body failed for {self.url}: {e}", exc_info=True)
            self.close()
            raise

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        close = getattr(self.body, "close", None)
        if close is not None:
            close()


class EntryPoint:
    def __init__(self, lifecycle: ApplicationLifecycle):
        self.lifecycle = lifecycle

    def __call__(self, environ, start_response):
        transport = WsgiTransport(environ, start_response)
        result = self.dispatch(transport)
        if isinstance(result, Ok):
            return LoggedBody(result.body, transport.url)
        return transport.write_json(500, error_payload(result.message), result.exc_info)

    def dispatch(self, transport: Transport) -> Result:
        logger.info(f"{transport.method} {transport.url}")

        try:
            app = self.lifecycle.get_or_create_application()
        except Exception as e:
            logger.error(f"Application initialization failed: {e}", exc_info=True)
            return Err(INITIALIZATION, str(e), sys.exc_info())

        try:
            return Ok(transport.forward(app))
        except Exception as e:
            logger.error(f"Request dispatch failed: {e}", exc_info=True)
            return Err(DISPATCH, str(e), sys.exc_info())
