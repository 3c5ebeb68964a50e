from __future__ import annotations

from fastapi.testclient import TestClient

from factories import SeededWorld


def test_current_rate_without_publication_returns_404(client: TestClient) -> None:
    response = client.get("/v1/rates/current")

    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


def test_publish_rate_returns_201_and_becomes_current(client: TestClient) -> None:
    response = client.post(
        "/v1/rates",
        json={
            "buy_rate": "38.5",
            "sell_rate": "40.25",
            "usd": "36.1",
            "bcv": "36.15",
            "created_by": "admin",
        },
    )

    body = response.json()
    assert response.status_code == 201
    assert body["buy_rate"] == "38.5000"
    assert body["sell_rate"] == "40.2500"
    assert body["is_custom"] is False

    current = client.get("/v1/rates/current")
    assert current.status_code == 200
    assert current.json()["id"] == body["id"]


def test_publish_rate_with_zero_value_returns_400(client: TestClient) -> None:
    response = client.post(
        "/v1/rates",
        json={
            "buy_rate": "0",
            "sell_rate": "40",
            "usd": "36",
            "bcv": "36",
            "created_by": "admin",
        },
    )

    assert response.status_code == 400
    assert response.json()["details"] == {"fields": ["buy_rate"]}


def test_publish_rate_with_malformed_value_returns_400(client: TestClient) -> None:
    response = client.post(
        "/v1/rates",
        json={
            "buy_rate": "38,5",
            "sell_rate": "40",
            "usd": "36",
            "bcv": "36",
            "created_by": "admin",
        },
    )

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_FAILED"


def test_current_rate_returns_seeded_rate(
    client: TestClient, world: SeededWorld
) -> None:
    response = client.get("/v1/rates/current")

    assert response.status_code == 200
    assert response.json()["id"] == str(world.rate_id)
    assert response.json()["bcv"] == "36.5000"


def test_get_rate_by_id_returns_snapshot(
    client: TestClient, world: SeededWorld
) -> None:
    response = client.get(f"/v1/rates/{world.rate_id}")

    assert response.status_code == 200
    assert response.json()["id"] == str(world.rate_id)
    assert response.json()["is_custom"] is False


def test_get_unknown_rate_returns_404(client: TestClient, world: SeededWorld) -> None:
    response = client.get(f"/v1/rates/{world.bank_id}")

    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"
