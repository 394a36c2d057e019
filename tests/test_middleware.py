from student_api.middleware import SECURITY_HEADERS


def test_security_headers(client):
    response = client.get("/api/health")

    for name in ("X-Content-Type-Options", "X-Frame-Options", "Strict-Transport-Security", "Content-Security-Policy"):
        assert response.headers[name] == SECURITY_HEADERS[name]


def test_security_headers_on_errors(client):
    response = client.get("/api/nowhere")

    assert response.headers["X-Content-Type-Options"] == "nosniff"


def test_cors_allows_any_origin_by_default(client):
    response = client.get("/api/health", headers={"Origin": "https://school.example"})

    assert response.headers["Access-Control-Allow-Origin"] in ("*", "https://school.example")
    assert "Access-Control-Allow-Credentials" not in response.headers


def test_cors_preflight(client):
    response = client.options(
        "/api/health",
        headers={
            "Origin": "https://school.example",
            "Access-Control-Request-Method": "DELETE",
            "Access-Control-Request-Headers": "Content-Type, Authorization",
        },
    )

    assert response.status_code == 200
    methods = response.headers["Access-Control-Allow-Methods"]
    for method in ("GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"):
        assert method in methods
    allowed = response.headers["Access-Control-Allow-Headers"].lower()
    assert "authorization" in allowed
    assert "content-type" in allowed


def test_cors_rejects_unlisted_header(client):
    response = client.options(
        "/api/health",
        headers={
            "Origin": "https://school.example",
            "Access-Control-Request-Method": "GET",
            "Access-Control-Request-Headers": "X-Debug",
        },
    )

    assert "x-debug" not in response.headers.get("Access-Control-Allow-Headers", "").lower()


def test_cors_configured_origin_and_credentials(make_lifecycle):
    environ = {"CORS_ORIGIN": "https://school.example", "CORS_CREDENTIALS": "true"}
    client = make_lifecycle(environ).get_or_create_application().test_client()

    allowed = client.get("/api/health", headers={"Origin": "https://school.example"})
    denied = client.get("/api/health", headers={"Origin": "https://evil.example"})

    assert allowed.headers["Access-Control-Allow-Origin"] == "https://school.example"
    assert allowed.headers["Access-Control-Allow-Credentials"] == "true"
    assert "Access-Control-Allow-Origin" not in denied.headers


def test_cors_wildcard_never_grants_credentials(make_lifecycle, caplog):
    client = make_lifecycle({"CORS_CREDENTIALS": "true"}).get_or_create_application().test_client()

    response = client.get("/api/health", headers={"Origin": "https://evil.example"})

    assert response.headers["Access-Control-Allow-Origin"] == "*"
    assert "Access-Control-Allow-Credentials" not in response.headers
    assert any("CORS_CREDENTIALS ignored" in record.getMessage() for record in caplog.records)
