"""
API Documentation

Builds an OpenAPI 3 document from the application's URL map and serves it
with Swagger UI:

- GET /api/docs       Swagger UI page
- GET /api/docs-json  OpenAPI document

Request bodies are described from the pydantic model attached by
@validate_body. The document is built on first request, after every
blueprint has been mounted.
"""

import re
from typing import Any, Dict

from flask import Blueprint, Flask, current_app, jsonify, render_template_string

from .config import ApiDocsConfig
from .interceptors import skip_transform

DOCS_PATH = "api/docs"
SWAGGER_UI_VERSION = "5.17.14"
SWAGGER_UI_CDN = f"https://cdn.jsdelivr.net/npm/swagger-ui-dist@{SWAGGER_UI_VERSION}"

# Swagger UI assets come from the CDN, so the page relaxes the default CSP
DOCS_CSP = (
    "default-src 'self';"
    "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net;"
    "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net;"
    "img-src 'self' data: https:;"
)

_RULE_ARGUMENT = re.compile(r"<(?:[^:<>]+:)?([^<>]+)>")
_IGNORED_METHODS = {"HEAD", "OPTIONS"}

SWAGGER_UI_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>{{ title }}</title>
  <link rel="stylesheet" href="{{ cdn }}/swagger-ui.css">
</head>
<body>
  <div id="swagger-ui"></div>
  <script src="{{ cdn }}/swagger-ui-bundle.js"></script>
  <script>
    window.ui = SwaggerUIBundle({url: "{{ spec_url }}", dom_id: "#swagger-ui"});
  </script>
</body>
</html>
"""


def _openapi_path(rule: str) -> str:
    return _RULE_ARGUMENT.sub(r"{\1}", rule)


def _operation(view, methods, rule, config: ApiDocsConfig) -> Dict[str, Dict[str, Any]]:
    doc = (view.__doc__ or "").strip()
    summary = doc.splitlines()[0] if doc else view.__name__.replace("_", " ")
    operation: Dict[str, Any] = {
        "summary": summary,
        "tags": [config.tag],
        "parameters": [
            {"name": name, "in": "path", "required": True, "schema": {"type": "string"}}
            for name in sorted(rule.arguments)
        ],
        "responses": {"200": {"description": "Successful response"}},
        "security": [{"bearer": []}],
    }
    schema = getattr(view, "request_schema", None)
    if schema is not None:
        operation["requestBody"] = {
            "required": True,
            "content": {"application/json": {"schema": schema.model_json_schema()}},
        }
    return {method.lower(): dict(operation) for method in methods}


def build_document(app: Flask, config: ApiDocsConfig) -> Dict[str, Any]:
    """Describe every routed endpoint except static files and the docs themselves."""
    paths: Dict[str, Dict[str, Any]] = {}
    for rule in app.url_map.iter_rules():
        if rule.endpoint == "static" or rule.endpoint.startswith("api_docs."):
            continue
        view = app.view_functions[rule.endpoint]
        methods = sorted((rule.methods or set()) - _IGNORED_METHODS)
        if not methods:
            continue
        path_item = paths.setdefault(_openapi_path(rule.rule), {})
        path_item.update(_operation(view, methods, rule, config))

    return {
        "openapi": "3.0.0",
        "info": {
            "title": config.title,
            "description": config.description,
            "version": config.version,
        },
        "tags": [{"name": config.tag}],
        "paths": paths,
        "components": {
            "securitySchemes": {
                "bearer": {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"},
            },
        },
    }


def mount_api_docs(app: Flask, config: ApiDocsConfig, path: str = DOCS_PATH) -> None:
    """Serve Swagger UI at /<path> and the OpenAPI document at /<path>-json."""
    bp = Blueprint("api_docs", __name__)
    ui_url = "/" + path.strip("/")
    spec_url = ui_url + "-json"

    @bp.get(ui_url)
    @skip_transform
    def swagger_ui():
        response = current_app.make_response(
            render_template_string(SWAGGER_UI_PAGE, title=config.title, cdn=SWAGGER_UI_CDN, spec_url=spec_url)
        )
        response.headers["Content-Security-Policy"] = DOCS_CSP
        return response

    @bp.get(spec_url)
    @skip_transform
    def openapi_document():
        document = current_app.extensions.get("openapi_document")
        if document is None:
            document = build_document(current_app, config)
            current_app.extensions["openapi_document"] = document
        return jsonify(document)

    app.register_blueprint(bp)
    app.extensions["api_docs"] = {"path": ui_url, "json_path": spec_url, "config": config}
