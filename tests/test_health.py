def test_health_endpoint(client):
    resp = client.get("/api/v1/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "success"
    assert body["data"]["status"] == "healthy"
    assert "timestamp" in body


def test_database_health_endpoint(client):
    resp = client.get("/api/v1/health/database")
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "healthy"
    assert "response_time_ms" in resp.json()["data"]


def test_security_headers_present(client):
    resp = client.get("/api/v1/health")
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert resp.headers["X-Frame-Options"] == "DENY"
    assert "X-Process-Time" in resp.headers


def test_unknown_route_uses_error_envelope(client):
    resp = client.get("/api/v1/does-not-exist")
    assert resp.status_code == 404
    assert resp.json()["status"] == "error"
