from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError

from giros.api.error_handlers import register_error_handlers
from giros.domain.errors import InsufficientBalanceError, NoEligibleAgentError


def _app() -> FastAPI:
    app = FastAPI()
    register_error_handlers(app)
    return app


def test_domain_error_handler_returns_contract_shape() -> None:
    app = _app()

    @app.get("/boom")
    def boom() -> None:
        raise InsufficientBalanceError()

    response = TestClient(app).get("/boom")

    assert response.status_code == 422
    body = response.json()
    assert body["code"] == "INSUFFICIENT_BALANCE"
    assert body["message"].startswith("Cause: ")
    assert "details" not in body


def test_domain_error_handler_serializes_details() -> None:
    app = _app()

    @app.get("/boom")
    def boom() -> None:
        raise NoEligibleAgentError("bank-1")

    response = TestClient(app).get("/boom")

    assert response.status_code == 422
    assert response.json()["details"] == {"bank_id": "bank-1"}


def test_sequence_race_is_reported_as_concurrency_conflict() -> None:
    app = _app()

    @app.get("/boom")
    def boom() -> None:
        raise IntegrityError(
            "INSERT INTO minorista_transactions",
            {},
            Exception(
                "UNIQUE constraint failed: "
                "minorista_transactions.minorista_id, minorista_transactions.sequence"
            ),
        )

    response = TestClient(app).get("/boom")

    assert response.status_code == 409
    assert response.json()["code"] == "CONCURRENCY_CONFLICT"


def test_other_integrity_errors_are_persistence_errors() -> None:
    app = _app()

    @app.get("/boom")
    def boom() -> None:
        raise IntegrityError(
            "INSERT INTO banks",
            {},
            Exception("UNIQUE constraint failed: banks.code"),
        )

    response = TestClient(app).get("/boom")

    assert response.status_code == 422
    assert response.json()["code"] == "PERSISTENCE_ERROR"


def test_unexpected_error_is_masked() -> None:
    app = _app()

    @app.get("/boom")
    def boom() -> None:
        raise RuntimeError("database exploded")

    response = TestClient(app, raise_server_exceptions=False).get("/boom")

    assert response.status_code == 500
    assert response.json()["code"] == "INTERNAL_SERVER_ERROR"
    assert "exploded" not in response.json()["message"]
