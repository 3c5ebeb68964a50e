from __future__ import annotations

from typing import Any
from uuid import uuid4

from fastapi.testclient import TestClient

from factories import SeededWorld


def _giro_payload(world: SeededWorld, **overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "beneficiary_name": "Maria Perez",
        "beneficiary_id": "V12345678",
        "bank_id": str(world.bank_id),
        "account_number": "01340000000000009999",
        "amount_input": "1000.00",
        "currency_input": "COP",
        "execution_type": "PAGO_MOVIL",
        "minorista_id": str(world.minorista_id),
        "created_by": "op-1",
    }
    payload.update(overrides)
    return payload


def test_create_giro_returns_201(client: TestClient, world: SeededWorld) -> None:
    response = client.post("/v1/giros", json=_giro_payload(world))

    body = response.json()
    assert response.status_code == 201
    assert body["status"] == "PENDIENTE"
    assert body["amount_input"] == "1000.00"
    assert body["amount_bs"] == "25.00"
    assert body["rate_id"] == str(world.rate_id)
    assert body["bcv_value_applied"] == "36.5000"
    assert body["bank_code"] == world.bank_code
    assert body["transferencista_id"] is None


def test_create_giro_with_zero_amount_returns_400(
    client: TestClient, world: SeededWorld
) -> None:
    response = client.post("/v1/giros", json=_giro_payload(world, amount_input="0"))

    assert response.status_code == 400
    assert response.json()["details"] == {"field": "amount_input"}


def test_create_giro_for_unknown_bank_returns_404(
    client: TestClient, world: SeededWorld
) -> None:
    response = client.post(
        "/v1/giros", json=_giro_payload(world, bank_id=str(uuid4()))
    )

    assert response.status_code == 404
    assert response.json()["details"]["entity"] == "Bank"


def test_giro_lifecycle_through_the_api(
    client: TestClient, world: SeededWorld
) -> None:
    giro_id = client.post("/v1/giros", json=_giro_payload(world)).json()["id"]

    assigned = client.post(f"/v1/giros/{giro_id}/assign")
    assert assigned.status_code == 200
    agent_id = assigned.json()["transferencista_id"]
    assert agent_id == str(world.transferencista_ids[0])

    started = client.post(f"/v1/giros/{giro_id}/start")
    assert started.json()["status"] == "PROCESANDO"

    completed = client.post(
        f"/v1/giros/{giro_id}/complete",
        json={
            "bank_account_id": str(world.account_ids[world.transferencista_ids[0]]),
            "actor_id": "agent-ana",
            "fee": "0.30",
        },
    )
    body = completed.json()
    assert completed.status_code == 200
    assert body["status"] == "COMPLETADO"
    assert body["minorista_profit"] == "50.00"
    assert body["system_profit"] == "0.00"
    assert body["completed_at"] is not None

    fetched = client.get(f"/v1/giros/{giro_id}")
    assert fetched.json()["status"] == "COMPLETADO"

    cancelled = client.post(f"/v1/giros/{giro_id}/cancel", json={"actor_id": "op-1"})
    assert cancelled.status_code == 409
    assert cancelled.json()["code"] == "INVALID_STATE_TRANSITION"


def test_start_pending_giro_returns_422(
    client: TestClient, world: SeededWorld
) -> None:
    giro_id = client.post("/v1/giros", json=_giro_payload(world)).json()["id"]

    response = client.post(f"/v1/giros/{giro_id}/start")

    assert response.status_code == 422
    assert response.json()["details"]["status"] == "PENDIENTE"


def test_return_without_reason_returns_400(
    client: TestClient, world: SeededWorld
) -> None:
    giro_id = client.post("/v1/giros", json=_giro_payload(world)).json()["id"]
    client.post(f"/v1/giros/{giro_id}/assign")
    client.post(f"/v1/giros/{giro_id}/start")

    response = client.post(
        f"/v1/giros/{giro_id}/return", json={"reason": "", "actor_id": "agent"}
    )

    assert response.status_code == 400
    assert client.get(f"/v1/giros/{giro_id}").json()["status"] == "PROCESANDO"


def test_returned_giro_keeps_reason(client: TestClient, world: SeededWorld) -> None:
    giro_id = client.post("/v1/giros", json=_giro_payload(world)).json()["id"]
    client.post(f"/v1/giros/{giro_id}/assign")
    client.post(f"/v1/giros/{giro_id}/start")

    response = client.post(
        f"/v1/giros/{giro_id}/return",
        json={"reason": "Cuenta cerrada", "actor_id": "agent"},
    )

    assert response.status_code == 200
    assert response.json()["status"] == "DEVUELTO"
    assert response.json()["return_reason"] == "Cuenta cerrada"


def test_get_unknown_giro_returns_404(client: TestClient) -> None:
    response = client.get(f"/v1/giros/{uuid4()}")

    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"
