from hiring_api.main import app


def test_root_banner(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json()["app"] == "Hiring Platform API"


def test_health_reports_each_backend(client, monkeypatch):
    monkeypatch.setattr("hiring_api.db.mongodb.check_mongo_connection", lambda: False)
    resp = client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["postgres"] == "connected"
    assert body["mongodb"] == "disconnected"
    assert body["status"] == "degraded"


def test_openapi_available(client):
    resp = client.get("/openapi.json")
    assert resp.status_code == 200
    assert resp.json()["info"]["title"] == "Hiring Platform API"
    paths = resp.json()["paths"]
    assert "/api/jobs/{shareable_link}/applications" in paths
    assert "/api/applications/{application_id}" in paths


def test_cors_allows_frontend_origin(client):
    resp = client.options(
        "/api/jobs",
        headers={"Origin": "http://localhost:5173", "Access-Control-Request-Method": "GET"},
    )
    assert resp.headers.get("access-control-allow-origin") == "http://localhost:5173"
    assert app.title == "Hiring Platform API"
