"""
Error Translation

Every failure that reaches Flask's error handling leaves the application in
one JSON shape:

    {
        "statusCode": 404,
        "message": "Student not found",
        "error": "Not Found",
        "path": "/api/students/42",
        "method": "GET",
        "timestamp": "2024-01-01T00:00:00.000000Z"
    }

Server errors are logged with their traceback; the message of an unexpected
exception is replaced by a generic one so internals do not leak.
"""

from datetime import datetime
from http import HTTPStatus
from typing import List, Union

from flask import Flask, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

GENERIC_SERVER_ERROR = "Internal server error"


class ApiError(Exception):
    """Base class for errors raised deliberately by request handlers."""

    status_code = 500

    def __init__(self, message: Union[str, List[str], None] = None):
        self.message = message if message is not None else HTTPStatus(self.status_code).phrase
        super().__init__(self.message if isinstance(self.message, str) else "; ".join(self.message))


class BadRequestError(ApiError):
    status_code = 400


class NotFoundError(ApiError):
    status_code = 404


class ConflictError(ApiError):
    status_code = 409


class RequestValidationError(BadRequestError):
    """Request body rejected by the validation policy; message lists every problem."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__(self.errors)


def error_body(status_code: int, message) -> dict:
    return {
        "statusCode": status_code,
        "message": message,
        "error": HTTPStatus(status_code).phrase,
        "path": request.path,
        "method": request.method,
        "timestamp": datetime.utcnow().isoformat() + "Z",
    }


def handle_api_error(error: ApiError):
    if error.status_code >= 500:
        current_app.logger.error(f"{request.method} {request.path} failed: {error}", exc_info=error)
    else:
        current_app.logger.warning(f"{request.method} {request.path} -> {error.status_code}: {error}")
    return jsonify(error_body(error.status_code, error.message)), error.status_code


def handle_http_exception(error: HTTPException):
    status_code = error.code or 500
    if status_code >= 500:
        current_app.logger.error(f"{request.method} {request.path} failed: {error}")
    response = jsonify(error_body(status_code, error.description or HTTPStatus(status_code).phrase))
    # Keep Allow / WWW-Authenticate and similar headers from werkzeug
    for key, value in error.get_headers():
        if key.lower() != "content-type":
            response.headers[key] = value
    return response, status_code


def handle_unexpected_error(error: Exception):
    # HTTPException subclasses are routed to handle_http_exception first
    current_app.logger.error(
        f"Unhandled error on {request.method} {request.path}: {error}", exc_info=error
    )
    return jsonify(error_body(500, GENERIC_SERVER_ERROR)), 500


def register_error_handlers(app: Flask) -> None:
    """Install the global error-translation filter on the app."""
    app.register_error_handler(ApiError, handle_api_error)
    app.register_error_handler(HTTPException, handle_http_exception)
    app.register_error_handler(Exception, handle_unexpected_error)
