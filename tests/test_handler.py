import pytest
from werkzeug.test import Client, create_environ

from student_api.handler import DISPATCH, INITIALIZATION, EntryPoint, Err, Ok
from student_api.transport import Transport


class FakeTransport(Transport):
    """Records what the entry point writes instead of talking WSGI"""

    def __init__(self, method="GET", url="http://localhost/api/health"):
        self._method = method
        self._url = url
        self.forwarded_to = None
        self.written = []

    @property
    def method(self):
        return self._method

    @property
    def url(self):
        return self._url

    def forward(self, app):
        self.forwarded_to = app
        return app(self)

    def write_status(self, status, headers, exc_info=None):
        self.written.append((status, headers))


class StubLifecycle:
    def __init__(self, app=None, error=None):
        self.app = app
        self.error = error

    def get_or_create_application(self):
        if self.error is not None:
            raise self.error
        return self.app


@pytest.fixture
def entry_client(lifecycle):
    return Client(EntryPoint(lifecycle))


def test_first_request_creates_application(lifecycle, entry_client):
    assert lifecycle.instance is None

    response = entry_client.get("/api/health")

    assert response.status_code == 200
    assert response.json["data"]["ok"] is True
    assert lifecycle.instance is not None


def test_subsequent_requests_reuse_application(lifecycle, entry_client):
    entry_client.get("/api/health")
    app = lifecycle.instance

    entry_client.get("/api/health")

    assert lifecycle.instance is app


def test_application_status_codes_pass_through(entry_client):
    response = entry_client.get("/api/nowhere")

    assert response.status_code == 404
    assert response.json["statusCode"] == 404
    assert response.json["path"] == "/api/nowhere"


def test_initialization_error_becomes_500():
    client = Client(EntryPoint(StubLifecycle(error=ConnectionError("connection refused"))))

    response = client.get("/api/health")

    assert response.status_code == 500
    assert response.json == {
        "statusCode": 500,
        "message": "Internal Server Error",
        "error": "connection refused",
    }


def test_escaping_dispatch_error_becomes_500():
    def broken_app(environ, start_response):
        raise ValueError("dispatcher crashed")

    client = Client(EntryPoint(StubLifecycle(app=broken_app)))
    response = client.post("/api/students")

    assert response.status_code == 500
    assert response.json["message"] == "Internal Server Error"
    assert response.json["error"] == "dispatcher crashed"


def test_dispatch_returns_ok_with_application_body():
    transport = FakeTransport()
    app = lambda t: [b"raw"]

    result = EntryPoint(StubLifecycle(app=app)).dispatch(transport)

    assert result == Ok([b"raw"])
    assert transport.forwarded_to is app
    assert transport.written == []


def test_dispatch_classifies_failures():
    init_failure = EntryPoint(StubLifecycle(error=RuntimeError("no config"))).dispatch(FakeTransport())

    def crash(transport):
        raise KeyError("route")
    dispatch_failure = EntryPoint(StubLifecycle(app=crash)).dispatch(FakeTransport())

    assert isinstance(init_failure, Err)
    assert (init_failure.kind, init_failure.message) == (INITIALIZATION, "no config")
    assert isinstance(dispatch_failure, Err)
    assert dispatch_failure.kind == DISPATCH


def test_write_json_sets_status_and_length():
    transport = FakeTransport()

    body = transport.write_json(500, {"statusCode": 500})

    status, headers = transport.written[0]
    assert status == 500
    assert ("Content-Type", "application/json") in headers
    assert ("Content-Length", str(len(body[0]))) in headers


def test_stream_failure_is_logged_and_closed(caplog):
    closed = []

    class BrokenStream:
        def __iter__(self):
            yield b"partial"
            raise RuntimeError("stream broke")

        def close(self):
            closed.append(True)

    def streaming_app(environ, start_response):
        start_response("200 OK", [("Content-Type", "text/plain")])
        return BrokenStream()

    statuses = []
    body = EntryPoint(StubLifecycle(app=streaming_app))(
        create_environ("/api/export"), lambda status, headers, exc_info=None: statuses.append(status)
    )

    with pytest.raises(RuntimeError, match="stream broke"):
        list(body)
    body.close()

    assert statuses == ["200 OK"]
    assert closed == [True]
    assert any("stream broke" in record.getMessage() for record in caplog.records)
