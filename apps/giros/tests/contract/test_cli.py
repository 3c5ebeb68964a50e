from __future__ import annotations

from decimal import Decimal

import pytest
from sqlalchemy.orm import Session, sessionmaker
from typer.testing import CliRunner

from factories import SeededWorld, build_stack
from giros.cli import app
from giros.db.models.minorista import Minorista
from giros.services.minorista_ledger_service import RechargeInput

runner = CliRunner()


def test_healthcheck_prints_ready() -> None:
    result = runner.invoke(app, ["healthcheck"])

    assert result.exit_code == 0
    assert "giros is ready" in result.stdout


def test_rebuild_balances_reports_and_repairs_drift(
    monkeypatch: pytest.MonkeyPatch,
    sqlite_session_factory: sessionmaker[Session],
    world: SeededWorld,
) -> None:
    monkeypatch.setattr("giros.cli.SessionFactory", sqlite_session_factory)
    with sqlite_session_factory() as session:
        build_stack(session).minoristas.recharge(
            RechargeInput(
                minorista_id=world.minorista_id,
                amount=Decimal("40.00"),
                created_by="admin",
            )
        )
        minorista = session.get(Minorista, world.minorista_id)
        assert minorista is not None
        minorista.credit_balance = Decimal("99.00")
        session.commit()

    dry_run = runner.invoke(app, ["rebuild-balances"])
    assert dry_run.exit_code == 1
    assert "Checked: 1 | Drifted: 1" in dry_run.stdout

    applied = runner.invoke(app, ["rebuild-balances", "--apply"])
    assert applied.exit_code == 0
    assert "repaired" in applied.stdout

    clean = runner.invoke(app, ["rebuild-balances"])
    assert clean.exit_code == 0
    assert "Checked: 1 | Drifted: 0" in clean.stdout
