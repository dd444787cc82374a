"""Tests for the system endpoints: ping, version and health check."""

from health_api.services.health_check_service import CheckResult, HealthCheckService, get_health_check_service


def test_ping(client):
    response = client.get("/ping")
    assert response.status_code == 200
    assert response.json()["ping"] == "pong"
    assert "server_time" in response.json()


def test_version(client):
    response = client.get("/version")
    assert response.status_code == 200
    assert {"version", "full_version", "is_dirty"} <= set(response.json())


def test_health_check_ok(client):
    response = client.get("/health-check")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["checks"][0]["check"] == "database_connection"
    assert body["checks"][0]["details"]["dialect"] == "sqlite"


class _FailingHealthCheck(HealthCheckService):
    def check_database_connection(self) -> CheckResult:
        return CheckResult(check="database_connection", success=False, message="Database is unreachable")


def test_health_check_failure_is_503(client):
    from health_api.app import app

    app.dependency_overrides[get_health_check_service] = _FailingHealthCheck
    response = client.get("/health-check")

    assert response.status_code == 503
    assert response.json()["status"] == "error"


def test_uploaded_documents_are_served(client, storage, settings, monkeypatch):
    # Point the static mount at the temporary upload directory
    from health_api.app import app

    url = storage.save("4f1c2d1e-0000-4000-8000-000000000000", "result", "laudo.pdf", b"%PDF")
    mount = next(route for route in app.routes if getattr(route, "name", None) == "uploads")
    monkeypatch.setattr(mount.app, "directory", storage.base_dir)
    monkeypatch.setattr(mount.app, "all_directories", [storage.base_dir])

    response = client.get(url)

    assert response.status_code == 200
    assert response.content == b"%PDF"


def test_cors_preflight_allows_overwrite_header(client):
    response = client.options(
        "/api/events",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "PUT",
            "Access-Control-Request-Headers": "X-Overwrite-Result",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
    assert response.headers["access-control-allow-credentials"] == "true"


def test_cors_rejects_unknown_origin(client):
    response = client.options(
        "/api/events",
        headers={"Origin": "https://evil.example", "Access-Control-Request-Method": "GET"},
    )
    assert response.status_code == 400
    assert "access-control-allow-origin" not in response.headers
