from fastapi import FastAPI
from fastapi.testclient import TestClient

from timetabling.core.middleware import SecurityHeadersMiddleware


def test_health_endpoints(client):
    live = client.get("/api/health/live")
    assert live.status_code == 200
    assert live.json()["status"] == "ok"

    ready = client.get("/api/health/ready")
    assert ready.status_code in {200, 503}
    payload = ready.json()
    assert "database" in payload
    assert set(payload["database"]) >= {"ok", "schema_ok", "missing_tables", "missing_columns"}


def test_security_headers_are_set(client):
    response = client.get("/api/health")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


def test_oversized_body_is_rejected(client):
    response = client.post(
        "/api/timetable",
        content=b" " * (3 * 1024 * 1024),
        headers={"content-type": "application/json"},
    )
    assert response.status_code == 413
    body = response.json()
    assert body["message"] == "Request body too large"
    assert body["details"]["content_length"] == 3 * 1024 * 1024


def _app_with_headers(**options):
    app = FastAPI()
    app.add_middleware(SecurityHeadersMiddleware, **options)

    @app.get("/ping")
    def ping() -> dict:
        return {"ok": True}

    return app


def test_hsts_is_opt_in():
    plain = TestClient(_app_with_headers()).get("/ping")
    assert "Strict-Transport-Security" not in plain.headers

    strict = TestClient(_app_with_headers(hsts_max_age_seconds=600)).get("/ping")
    assert strict.headers["Strict-Transport-Security"] == "max-age=600; includeSubDomains"
