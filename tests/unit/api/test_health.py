from resourcehub.api.database import close_database_adapter


def test_liveness(client):
    response = client.get("/health/live")
    assert response.status_code == 200
    assert response.json() == {"status": "alive"}


def test_readiness_without_database(client):
    """Without lifespan startup the adapter is not connected."""
    body = client.get("/health/ready").json()
    close_database_adapter()

    assert body["status"] == "not_ready"
    assert body["checks"]["database"] == "unhealthy"


def test_metrics_exposed(client, people):
    client.post("/api/v1/allocations/check", json={
        "employee_id": people["alice"]["id"],
        "start_date": "2024-01-01",
        "end_date": "2024-01-05",
        "allocated_hours": 10,
    })

    response = client.get("/metrics/")

    assert response.status_code == 200
    assert "resourcehub_over_allocation_checks_total" in response.text
