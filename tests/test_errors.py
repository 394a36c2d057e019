import pytest
from flask import Blueprint

from student_api.errors import ConflictError
from student_api.modules import AppModule
from student_api.routes import health_bp

failing_bp = Blueprint("failing", __name__)


@failing_bp.get("/conflict")
def conflict():
    raise ConflictError("Student code already exists")


@failing_bp.get("/crash")
def crash():
    raise RuntimeError("password=hunter2 leaked in driver error")


@pytest.fixture
def app(make_lifecycle):
    module = AppModule(blueprints=(health_bp, failing_bp))
    return make_lifecycle(module=module).get_or_create_application()


def test_api_error_shape(client):
    response = client.get("/api/conflict")

    assert response.status_code == 409
    body = response.json
    assert body["statusCode"] == 409
    assert body["message"] == "Student code already exists"
    assert body["error"] == "Conflict"
    assert body["path"] == "/api/conflict"
    assert body["method"] == "GET"
    assert body["timestamp"].endswith("Z")


def test_unknown_route(client):
    response = client.get("/api/students/42")

    assert response.status_code == 404
    assert response.json["error"] == "Not Found"


def test_method_not_allowed_keeps_allow_header(client):
    response = client.delete("/api/health")

    assert response.status_code == 405
    assert response.json["statusCode"] == 405
    assert "GET" in response.headers["Allow"]


def test_unexpected_error_is_not_leaked(client):
    response = client.get("/api/crash")

    assert response.status_code == 500
    assert response.json["message"] == "Internal server error"
    assert "hunter2" not in response.get_data(as_text=True)


def test_unhealthy_database_is_reported(client, monkeypatch):
    monkeypatch.setattr("student_api.routes.check_db_connection", lambda: (False, "Database connection failed"))

    response = client.get("/api/health")

    assert response.status_code == 503
    assert response.json == {
        "ok": False,
        "database": {"healthy": False, "message": "Database connection failed"},
    }
