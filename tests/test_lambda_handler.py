"""
Lambda entry: API Gateway HTTP API (v2) events through Mangum and asgiref.
"""
import json
from types import SimpleNamespace

from asgiref.wsgi import WsgiToAsgi
from mangum import Mangum

from student_api.handler import EntryPoint


def http_api_event(method, path, headers=None, body=None):
    return {
        "version": "2.0",
        "routeKey": "$default",
        "rawPath": path,
        "rawQueryString": "",
        "headers": {"host": "abc123.lambda-url.us-east-1.on.aws", **(headers or {})},
        "requestContext": {
            "accountId": "123456789012",
            "apiId": "abc123",
            "domainName": "abc123.lambda-url.us-east-1.on.aws",
            "http": {
                "method": method,
                "path": path,
                "protocol": "HTTP/1.1",
                "sourceIp": "203.0.113.7",
                "userAgent": "pytest",
            },
            "requestId": "req-1",
            "routeKey": "$default",
            "stage": "$default",
        },
        "body": body,
        "isBase64Encoded": False,
    }


def lambda_context():
    return SimpleNamespace(function_name="student-api", aws_request_id="req-1")


def test_module_builds_handler_without_creating_app():
    import lambda_handler

    assert isinstance(lambda_handler.handler, Mangum)
    assert lambda_handler.lifecycle.instance is None


def test_health_through_mangum(lifecycle):
    handler = Mangum(WsgiToAsgi(EntryPoint(lifecycle)), lifespan="off")

    response = handler(http_api_event("GET", "/api/health"), lambda_context())

    assert response["statusCode"] == 200
    body = json.loads(response["body"])
    assert body["success"] is True
    assert body["data"]["ok"] is True
    assert lifecycle.instance is not None


def test_warm_invocation_reuses_app(lifecycle):
    handler = Mangum(WsgiToAsgi(EntryPoint(lifecycle)), lifespan="off")

    handler(http_api_event("GET", "/api/health"), lambda_context())
    app = lifecycle.instance
    handler(http_api_event("GET", "/api/health"), lambda_context())

    assert lifecycle.instance is app


def test_initialization_failure_through_mangum(lifecycle, monkeypatch):
    from student_api.lifecycle import ApplicationLifecycle

    def explode(self, app):
        raise RuntimeError("cors misconfigured")
    monkeypatch.setattr(ApplicationLifecycle, "enable_cors", explode)
    handler = Mangum(WsgiToAsgi(EntryPoint(lifecycle)), lifespan="off")

    response = handler(http_api_event("GET", "/api/health"), lambda_context())

    assert response["statusCode"] == 500
    assert json.loads(response["body"]) == {
        "statusCode": 500,
        "message": "Internal Server Error",
        "error": "cors misconfigured",
    }
