from __future__ import annotations

from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from factories import RecordingNotifier, SeededWorld, build_stack, seed_world
from giros.db.models.bank import Currency
from giros.db.models.bank_account import BankAccount
from giros.db.models.bank_account_transaction import (
    BankAccountTransaction,
    BankAccountTransactionType,
)
from giros.db.models.giro import ExecutionType, Giro, GiroStatus
from giros.db.models.minorista import Minorista
from giros.db.models.minorista_transaction import (
    MinoristaTransaction,
    MinoristaTransactionStatus,
    MinoristaTransactionType,
)
from giros.domain.errors import InsufficientBalanceError
from giros.services.giro_service import CompleteGiroInput, CreateGiroInput
from giros.services.rate_book_service import RateValues


def _create_input(world: SeededWorld, **overrides: object) -> CreateGiroInput:
    values: dict[str, object] = {
        "beneficiary_name": "Maria Perez",
        "beneficiary_id": "V12345678",
        "bank_id": world.bank_id,
        "account_number": "01340000000000009999",
        "amount_input": Decimal("1000.00"),
        "currency_input": Currency.COP,
        "created_by": "op-1",
        "minorista_id": world.minorista_id,
        "execution_type": ExecutionType.PAGO_MOVIL,
    }
    values.update(overrides)
    return CreateGiroInput(**values)  # type: ignore[arg-type]


def test_giro_from_creation_to_settlement(
    sqlite_session_factory: sessionmaker[Session],
    world: SeededWorld,
) -> None:
    with sqlite_session_factory() as session:
        notifier = RecordingNotifier()
        stack = build_stack(session, notifier=notifier)

        giro = stack.giros.create_giro(_create_input(world))
        assert giro.status == GiroStatus.PENDIENTE
        assert giro.amount_bs == Decimal("25.00")
        assert giro.rate_id == world.rate_id

        stack.giros.assign_giro(giro.id)
        agent_id = world.transferencista_ids[0]
        assert giro.transferencista_id == agent_id

        stack.giros.start_processing(giro.id)
        stack.giros.complete_giro(
            CompleteGiroInput(
                giro_id=giro.id,
                bank_account_id=world.account_ids[agent_id],
                actor_id="agent-ana",
            )
        )

    with sqlite_session_factory() as session:
        stored = session.get(Giro, giro.id)
        assert stored is not None
        assert stored.status == GiroStatus.COMPLETADO
        assert stored.completed_at is not None
        assert stored.minorista_profit == Decimal("50.00")
        assert stored.system_profit == Decimal("0.00")
        assert stored.bank_account_used_id == world.account_ids[agent_id]

        minorista = session.get(Minorista, world.minorista_id)
        assert minorista is not None
        assert minorista.available_credit == Decimal("0.00")
        assert minorista.credit_balance == Decimal("50.00")

        [discount] = session.scalars(select(MinoristaTransaction)).all()
        assert discount.type == MinoristaTransactionType.DISCOUNT
        assert discount.status == MinoristaTransactionStatus.COMPLETED
        assert discount.giro_id == giro.id
        assert discount.sequence == 1
        assert discount.previous_available_credit == Decimal("1000.00")
        assert discount.accumulated_debt == Decimal("1000.00")
        assert discount.remaining_balance == Decimal("50.00")

        [withdrawal] = session.scalars(select(BankAccountTransaction)).all()
        assert withdrawal.type == BankAccountTransactionType.WITHDRAWAL
        assert withdrawal.amount == Decimal("25.00")
        assert withdrawal.current_balance == Decimal("99975.00")
        assert withdrawal.giro_id == giro.id

        account = session.get(BankAccount, world.account_ids[agent_id])
        assert account is not None
        assert account.balance == Decimal("99975.00")

    assert notifier.events == [("assigned", giro.id), ("completed", giro.id)]


def test_consecutive_giros_rotate_through_bank_pool(
    sqlite_session_factory: sessionmaker[Session],
    world: SeededWorld,
) -> None:
    with sqlite_session_factory() as session:
        stack = build_stack(session)
        assigned = []
        for _ in range(4):
            giro = stack.giros.create_giro(_create_input(world, minorista_id=None))
            assigned.append(stack.giros.assign_giro(giro.id).transferencista_id)

    first, second, third = world.transferencista_ids
    assert assigned == [first, second, third, first]


def test_failed_withdrawal_rolls_back_the_whole_settlement(
    sqlite_session_factory: sessionmaker[Session],
) -> None:
    with sqlite_session_factory() as session:
        world = seed_world(session, account_balance=Decimal("10.00"))
        stack = build_stack(session)
        giro = stack.giros.create_giro(_create_input(world))
        stack.giros.assign_giro(giro.id)
        stack.giros.start_processing(giro.id)
        giro_id = giro.id
        agent_id = world.transferencista_ids[0]

        with pytest.raises(InsufficientBalanceError):
            stack.giros.complete_giro(
                CompleteGiroInput(
                    giro_id=giro_id,
                    bank_account_id=world.account_ids[agent_id],
                    actor_id="agent-ana",
                )
            )

    with sqlite_session_factory() as session:
        stored = session.get(Giro, giro_id)
        assert stored is not None
        assert stored.status == GiroStatus.PROCESANDO
        assert stored.completed_at is None

        minorista = session.get(Minorista, world.minorista_id)
        assert minorista is not None
        assert minorista.available_credit == Decimal("1000.00")
        assert session.scalars(select(MinoristaTransaction)).all() == []
        assert session.scalars(select(BankAccountTransaction)).all() == []

        account = session.get(BankAccount, world.account_ids[agent_id])
        assert account is not None
        assert account.balance == Decimal("10.00")


def test_custom_rate_is_stored_without_replacing_current_rate(
    sqlite_session_factory: sessionmaker[Session],
    world: SeededWorld,
) -> None:
    with sqlite_session_factory() as session:
        stack = build_stack(session)
        giro = stack.giros.create_giro(
            _create_input(
                world,
                custom_rate=RateValues(
                    buy_rate=Decimal("38"),
                    sell_rate=Decimal("50"),
                    usd=Decimal("36.5"),
                    bcv=Decimal("36.5"),
                ),
            )
        )

        assert giro.rate_id != world.rate_id
        assert giro.amount_bs == Decimal("20.00")
        assert stack.rate_book.get_current_rate().id == world.rate_id
        assert stack.rate_book.get_rate(giro.rate_id).is_custom is True
