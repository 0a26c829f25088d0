from __future__ import annotations

from fastapi.testclient import TestClient


def test_health_echoes_incoming_correlation_id(client: TestClient) -> None:
    response = client.get("/health", headers={"x-correlation-id": "cid-health-echo"})
    assert response.status_code == 200
    assert response.headers.get("x-correlation-id") == "cid-health-echo"


def test_health_generates_correlation_id_when_missing(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    correlation_id = response.headers.get("x-correlation-id")
    assert correlation_id
    assert len(correlation_id) >= 8


def test_unsafe_correlation_id_is_replaced(client: TestClient) -> None:
    response = client.get("/health", headers={"x-correlation-id": "bad id!"})
    assert response.status_code == 200
    assert response.headers.get("x-correlation-id") != "bad id!"


def test_streak_card_response_keeps_correlation_id(client: TestClient) -> None:
    response = client.get(
        "/api/streak-card",
        params={"platforms": '[{"platform": "unstop", "username": "dev"}]'},
        headers={"x-correlation-id": "cid-card-render"},
    )
    assert response.status_code == 200
    assert response.headers.get("x-correlation-id") == "cid-card-render"
