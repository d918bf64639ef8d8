from fastapi.testclient import TestClient


def test_health(test_client: TestClient):
    response = test_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_readiness_reports_dependencies(test_client: TestClient):
    response = test_client.get("/health/ready")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["circuit_breaker"] == {"name": "catalog_store", "state": "closed"}
    assert data["feature_flags"]["kill_switch_active"] is False
    assert set(data["rate_limiters"]) == {"api", "payment"}


def test_request_id_propagated(test_client: TestClient):
    response = test_client.get("/health", headers={"X-Request-ID": "abc123"})

    assert response.headers["X-Request-ID"] == "abc123"


def test_request_id_generated(test_client: TestClient):
    response = test_client.get("/health")

    assert len(response.headers["X-Request-ID"]) == 32
