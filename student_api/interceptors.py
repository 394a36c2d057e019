"""
Global Interceptors

Interceptors wrap every request of the application. The chain registers one
before_request and one after_request hook and runs its interceptors in
installation order for both, so with [LoggingInterceptor, TransformInterceptor]
the logger sees the response exactly as the view (or the error filter)
produced it and the transform envelope is the last rewrite of the body.
"""

import time
from datetime import datetime
from typing import List

from flask import Flask, Response, current_app, g, request

from .logging_utils import safe_str, sanitize_headers


class Interceptor:
    """Hook pair run around each request."""

    def before(self) -> None:
        pass

    def after(self, response: Response) -> Response:
        return response


class InterceptorChain:
    def __init__(self):
        self.interceptors: List[Interceptor] = []

    def install(self, app: Flask, *interceptors: Interceptor) -> None:
        if not self.interceptors:
            app.before_request(self._before)
            app.after_request(self._after)
        self.interceptors.extend(interceptors)
        app.extensions["interceptors"] = self

    def _before(self):
        for interceptor in self.interceptors:
            interceptor.before()

    def _after(self, response: Response) -> Response:
        for interceptor in self.interceptors:
            response = interceptor.after(response)
        return response


def use_global_interceptors(app: Flask, *interceptors: Interceptor) -> InterceptorChain:
    chain = app.extensions.get("interceptors") or InterceptorChain()
    chain.install(app, *interceptors)
    return chain


class LoggingInterceptor(Interceptor):
    """Logs each request line and the raw outcome with its duration."""

    def before(self) -> None:
        g.request_started_at = time.perf_counter()
        current_app.logger.debug(
            f"Incoming {request.method} {request.path} "
            f"query={safe_str(request.args.to_dict())} headers={sanitize_headers(request.headers)}"
        )

    def after(self, response: Response) -> Response:
        started = g.get("request_started_at")
        elapsed_ms = (time.perf_counter() - started) * 1000 if started is not None else 0.0
        size = "stream" if response.is_streamed else f"{response.calculate_content_length() or 0}b"
        current_app.logger.info(
            f"{request.method} {request.path} {response.status_code} {size} {elapsed_ms:.1f}ms"
        )
        return response


def skip_transform(view):
    """Mark a view whose JSON body must leave the app unwrapped."""
    view.skip_transform = True
    return view


class TransformInterceptor(Interceptor):
    """
    Wrap successful JSON responses in the API envelope:

        {"success": true, "statusCode": 200, "data": <body>, "timestamp": "..."}

    Error responses keep the error filter's shape. 204/205 responses, empty
    bodies and bodies that do not parse as JSON leave unwrapped.
    """

    def after(self, response: Response) -> Response:
        if not 200 <= response.status_code < 300 or response.status_code in (204, 205):
            return response
        if response.is_streamed or not response.is_json:
            return response
        view = current_app.view_functions.get(request.endpoint) if request.endpoint else None
        if getattr(view, "skip_transform", False):
            return response

        raw = response.get_data()
        if not raw.strip():
            return response
        data = response.get_json(silent=True)
        if data is None and raw.strip() != b"null":
            return response

        envelope = {
            "success": True,
            "statusCode": response.status_code,
            "data": data,
            "timestamp": datetime.utcnow().isoformat() + "Z",
        }
        response.set_data(current_app.json.dumps(envelope))
        return response
