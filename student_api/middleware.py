"""
Security Hardening and Compression

Security headers mirror helmet's defaults. A view that needs a looser
Content-Security-Policy (the API docs page loads Swagger UI from a CDN) sets
its own header, which is left untouched.
"""

from flask import Flask, Response
from flask_compress import Compress

SECURITY_HEADERS = {
    "Content-Security-Policy": (
        "default-src 'self';base-uri 'self';font-src 'self' https: data:;"
        "form-action 'self';frame-ancestors 'self';img-src 'self' data:;"
        "object-src 'none';script-src 'self';script-src-attr 'none';"
        "style-src 'self' https: 'unsafe-inline';upgrade-insecure-requests"
    ),
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Origin-Agent-Cluster": "?1",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Frame-Options": "SAMEORIGIN",
    "X-Permitted-Cross-Domain-Policies": "none",
    "X-XSS-Protection": "0",
}

compress = Compress()


def apply_security_headers(response: Response) -> Response:
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response


def use_security_middleware(app: Flask) -> None:
    """Attach security headers and response compression."""
    app.after_request(apply_security_headers)
    app.config.setdefault("COMPRESS_MIMETYPES", [
        "application/json", "text/html", "text/css", "application/javascript",
    ])
    compress.init_app(app)
