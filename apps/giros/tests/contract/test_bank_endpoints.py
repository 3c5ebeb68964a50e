from __future__ import annotations

from fastapi.testclient import TestClient

from factories import SeededWorld


def test_account_movement_updates_balance(
    client: TestClient, world: SeededWorld
) -> None:
    response = client.post(
        f"/v1/bank-accounts/{world.platform_account_id}/movements",
        json={
            "type": "DEPOSIT",
            "amount": "250.00",
            "fee": "1.50",
            "created_by": "admin",
        },
    )

    body = response.json()
    assert response.status_code == 201
    assert body["previous_balance"] == "0.00"
    assert body["current_balance"] == "248.50"

    account = client.get(f"/v1/bank-accounts/{world.platform_account_id}").json()
    assert account["balance"] == "248.50"
    assert account["owner_type"] == "PLATFORM"

    entries = client.get(
        f"/v1/bank-accounts/{world.platform_account_id}/transactions"
    ).json()
    assert [entry["sequence"] for entry in entries] == [1]


def test_overdrawing_withdrawal_returns_422(
    client: TestClient, world: SeededWorld
) -> None:
    response = client.post(
        f"/v1/bank-accounts/{world.platform_account_id}/movements",
        json={"type": "WITHDRAWAL", "amount": "1.00", "created_by": "admin"},
    )

    assert response.status_code == 422
    assert response.json()["code"] == "INSUFFICIENT_BALANCE"
    account = client.get(f"/v1/bank-accounts/{world.platform_account_id}").json()
    assert account["balance"] == "0.00"


def test_bank_notes_are_recorded_and_listed(
    client: TestClient, world: SeededWorld
) -> None:
    created = client.post(
        f"/v1/banks/{world.bank_id}/transactions",
        json={
            "type": "OUTFLOW",
            "amount": "75.00",
            "description": "Pago de comisiones",
            "created_by": "admin",
        },
    )
    assert created.status_code == 201

    listing = client.get(f"/v1/banks/{world.bank_id}/transactions").json()
    assert listing["total"] == 1
    assert listing["items"][0]["type"] == "OUTFLOW"


def test_disabled_assignment_leaves_bank_pool(
    client: TestClient, world: SeededWorld
) -> None:
    first, second, third = world.transferencista_ids
    for agent_id in (first, second):
        response = client.patch(
            f"/v1/banks/{world.bank_id}/assignments/{agent_id}",
            json={"is_active": False},
        )
        assert response.status_code == 200
        assert response.json()["is_active"] is False

    giro_id = client.post(
        "/v1/giros",
        json={
            "beneficiary_name": "Maria Perez",
            "beneficiary_id": "V12345678",
            "bank_id": str(world.bank_id),
            "account_number": "01340000000000009999",
            "amount_input": "100.00",
            "currency_input": "VES",
            "created_by": "op-1",
        },
    ).json()["id"]

    assigned = client.post(f"/v1/giros/{giro_id}/assign").json()
    assert assigned["transferencista_id"] == str(third)


def test_duplicate_assignment_returns_422(
    client: TestClient, world: SeededWorld
) -> None:
    response = client.post(
        f"/v1/banks/{world.bank_id}/assignments",
        json={"transferencista_id": str(world.transferencista_ids[0])},
    )

    assert response.status_code == 422


def test_assign_with_empty_pool_returns_no_eligible_agent(
    client: TestClient, world: SeededWorld
) -> None:
    for agent_id in world.transferencista_ids:
        client.patch(
            f"/v1/banks/{world.bank_id}/assignments/{agent_id}",
            json={"is_active": False},
        )
    giro_id = client.post(
        "/v1/giros",
        json={
            "beneficiary_name": "Maria Perez",
            "beneficiary_id": "V12345678",
            "bank_id": str(world.bank_id),
            "account_number": "01340000000000009999",
            "amount_input": "100.00",
            "currency_input": "VES",
            "created_by": "op-1",
        },
    ).json()["id"]

    response = client.post(f"/v1/giros/{giro_id}/assign")

    assert response.status_code == 422
    assert response.json()["code"] == "NO_ELIGIBLE_AGENT"
    assert client.get(f"/v1/giros/{giro_id}").json()["status"] == "PENDIENTE"
