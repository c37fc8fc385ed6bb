from services.keepalive_service import server_status


def test_root(client):
    assert client.get("/").status_code == 200


def test_up(client):
    response = client.get("/api/up")
    assert response.json() == {"message": "Server is running"}


def test_health_check(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_server_test_reports_database_and_ping_status(client):
    server_status.mark_error(RuntimeError("boom"))

    data = client.get("/api/test").json()

    assert data["message"] == "Server is running"
    assert data["database"] == "Connected"
    assert data["server_error"] == "boom"
    assert data["server_error_time"] is not None
    assert "timestamp" in data

    server_status.mark_response()
