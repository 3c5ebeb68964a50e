from __future__ import annotations

from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from factories import SeededWorld, build_stack
from giros.db.models.bank import Currency
from giros.db.models.giro import ExecutionType, Giro, GiroStatus
from giros.db.models.minorista import Minorista
from giros.db.models.minorista_transaction import (
    MinoristaTransaction,
    MinoristaTransactionStatus,
    MinoristaTransactionType,
)
from giros.domain.errors import InvalidStateTransitionError
from giros.services.giro_service import CompleteGiroInput, CreateGiroInput


def _create_input(world: SeededWorld) -> CreateGiroInput:
    return CreateGiroInput(
        beneficiary_name="Maria Perez",
        beneficiary_id="V12345678",
        bank_id=world.bank_id,
        account_number="01340000000000009999",
        amount_input=Decimal("400.00"),
        currency_input=Currency.COP,
        created_by="op-1",
        minorista_id=world.minorista_id,
        execution_type=ExecutionType.PAGO_MOVIL,
    )


def _entries(session: Session) -> list[MinoristaTransaction]:
    return list(
        session.scalars(
            select(MinoristaTransaction).order_by(MinoristaTransaction.sequence.asc())
        ).all()
    )


def test_created_giro_reserves_credit_until_cancelled(
    sqlite_session_factory: sessionmaker[Session],
    world: SeededWorld,
) -> None:
    with sqlite_session_factory() as session:
        stack = build_stack(session, reserve_credit_on_create=True)
        giro = stack.giros.create_giro(_create_input(world))

        minorista = session.get(Minorista, world.minorista_id)
        assert minorista is not None
        assert minorista.available_credit == Decimal("600.00")
        assert minorista.credit_balance == Decimal("20.00")

        stack.giros.cancel_giro(giro.id, actor_id="op-1")

    with sqlite_session_factory() as session:
        minorista = session.get(Minorista, world.minorista_id)
        assert minorista is not None
        assert minorista.available_credit == Decimal("1000.00")
        assert minorista.credit_balance == Decimal("0.00")

        hold, reversal = _entries(session)
        assert hold.status == MinoristaTransactionStatus.CANCELLED
        assert reversal.type == MinoristaTransactionType.ADJUSTMENT
        assert reversal.reverses_transaction_id == hold.id
        assert reversal.previous_available_credit == Decimal("600.00")
        assert reversal.available_credit == Decimal("1000.00")

        stack = build_stack(session)
        history, total = stack.minoristas.list_history(world.minorista_id)
        assert total == 1
        assert [entry.id for entry in history] == [reversal.id]


def test_returned_giro_releases_reserved_credit(
    sqlite_session_factory: sessionmaker[Session],
    world: SeededWorld,
) -> None:
    with sqlite_session_factory() as session:
        stack = build_stack(session, reserve_credit_on_create=True)
        giro = stack.giros.create_giro(_create_input(world))
        stack.giros.assign_giro(giro.id)
        stack.giros.start_processing(giro.id)

        stack.giros.return_giro(giro.id, reason="Cuenta cerrada", actor_id="agent")

    with sqlite_session_factory() as session:
        minorista = session.get(Minorista, world.minorista_id)
        assert minorista is not None
        assert minorista.available_credit == Decimal("1000.00")
        assert [entry.status for entry in _entries(session)] == [
            MinoristaTransactionStatus.CANCELLED,
            MinoristaTransactionStatus.COMPLETED,
        ]


def test_completion_promotes_reserved_discount(
    sqlite_session_factory: sessionmaker[Session],
    world: SeededWorld,
) -> None:
    with sqlite_session_factory() as session:
        stack = build_stack(session, reserve_credit_on_create=True)
        giro = stack.giros.create_giro(_create_input(world))
        stack.giros.assign_giro(giro.id)
        stack.giros.start_processing(giro.id)
        agent_id = world.transferencista_ids[0]

        stack.giros.complete_giro(
            CompleteGiroInput(
                giro_id=giro.id,
                bank_account_id=world.account_ids[agent_id],
                actor_id="agent-ana",
            )
        )

    with sqlite_session_factory() as session:
        [entry] = _entries(session)
        assert entry.status == MinoristaTransactionStatus.COMPLETED
        assert entry.giro_id == giro.id

        minorista = session.get(Minorista, world.minorista_id)
        assert minorista is not None
        assert minorista.available_credit == Decimal("600.00")
        assert minorista.credit_balance == Decimal("20.00")


def test_closed_giro_never_reverses_its_hold_twice(
    sqlite_session_factory: sessionmaker[Session],
    world: SeededWorld,
) -> None:
    with sqlite_session_factory() as session:
        stack = build_stack(session, reserve_credit_on_create=True)
        giro_id = stack.giros.create_giro(_create_input(world)).id
        stack.giros.cancel_giro(giro_id, actor_id="op-1")

        with pytest.raises(InvalidStateTransitionError):
            stack.giros.cancel_giro(giro_id, actor_id="op-1")
        with pytest.raises(InvalidStateTransitionError):
            stack.giros.return_giro(giro_id, reason="Repetido", actor_id="op-1")

    with sqlite_session_factory() as session:
        hold, reversal = _entries(session)
        assert hold.status == MinoristaTransactionStatus.CANCELLED
        assert reversal.reverses_transaction_id == hold.id

        stored = session.get(Giro, giro_id)
        assert stored is not None
        assert stored.status == GiroStatus.CANCELADO

        minorista = session.get(Minorista, world.minorista_id)
        assert minorista is not None
        assert minorista.available_credit == Decimal("1000.00")
        assert minorista.credit_balance == Decimal("0.00")
