from __future__ import annotations

from decimal import Decimal

import pytest
from sqlalchemy.orm import Session, sessionmaker

from factories import SeededWorld, build_stack
from giros.db.models.bank_account import BankAccount
from giros.db.models.bank_account_transaction import BankAccountTransactionType
from giros.db.models.bank_transaction import BankTransactionType
from giros.domain.errors import InsufficientBalanceError, ValidationFailedError
from giros.services.bank_ledger_service import AccountMovementInput, BankNoteInput


def test_account_movements_chain_balances(
    sqlite_session_factory: sessionmaker[Session],
    world: SeededWorld,
) -> None:
    with sqlite_session_factory() as session:
        stack = build_stack(session)
        deposit = stack.banks.post_movement(
            AccountMovementInput(
                bank_account_id=world.platform_account_id,
                movement_type=BankAccountTransactionType.DEPOSIT,
                amount=Decimal("500.00"),
                fee=Decimal("2.00"),
                created_by="admin",
            )
        )
        adjustment = stack.banks.post_movement(
            AccountMovementInput(
                bank_account_id=world.platform_account_id,
                movement_type=BankAccountTransactionType.ADJUSTMENT,
                amount=Decimal("-98.00"),
                created_by="admin",
                reference="Conciliacion",
            )
        )

        assert deposit.previous_balance == Decimal("0.00")
        assert deposit.current_balance == Decimal("498.00")
        assert adjustment.previous_balance == Decimal("498.00")
        assert adjustment.current_balance == Decimal("400.00")
        entries = stack.banks.list_account_entries(world.platform_account_id)
        assert [entry.sequence for entry in entries] == [1, 2]


def test_overdrawing_withdrawal_is_refused_and_leaves_balance(
    sqlite_session_factory: sessionmaker[Session],
    world: SeededWorld,
) -> None:
    with sqlite_session_factory() as session:
        stack = build_stack(session)

        with pytest.raises(InsufficientBalanceError):
            stack.banks.post_movement(
                AccountMovementInput(
                    bank_account_id=world.platform_account_id,
                    movement_type=BankAccountTransactionType.WITHDRAWAL,
                    amount=Decimal("1.00"),
                    created_by="admin",
                )
            )

    with sqlite_session_factory() as session:
        account = session.get(BankAccount, world.platform_account_id)
        assert account is not None
        assert account.balance == Decimal("0.00")
        assert build_stack(session).banks.list_account_entries(account.id) == []


def test_zero_deposit_is_a_validation_error(
    sqlite_session_factory: sessionmaker[Session],
    world: SeededWorld,
) -> None:
    with sqlite_session_factory() as session:
        stack = build_stack(session)

        with pytest.raises(ValidationFailedError):
            stack.banks.post_movement(
                AccountMovementInput(
                    bank_account_id=world.platform_account_id,
                    movement_type=BankAccountTransactionType.DEPOSIT,
                    amount=Decimal("0.00"),
                    created_by="admin",
                )
            )


def test_bank_notes_do_not_move_account_balances(
    sqlite_session_factory: sessionmaker[Session],
    world: SeededWorld,
) -> None:
    with sqlite_session_factory() as session:
        stack = build_stack(session)
        inflow = stack.banks.record_note(
            BankNoteInput(
                bank_id=world.bank_id,
                note_type=BankTransactionType.INFLOW,
                amount=Decimal("1500.00"),
                description="Fondeo semanal",
                created_by="admin",
            )
        )
        stack.banks.record_note(
            BankNoteInput(
                bank_id=world.bank_id,
                note_type=BankTransactionType.NOTE,
                amount=Decimal("0.00"),
                description="Banco en mantenimiento",
                created_by="admin",
            )
        )

        notes, total = stack.banks.list_notes(world.bank_id)
        assert total == 2
        assert inflow.id in {note.id for note in notes}
        account = stack.banks.get_account(world.platform_account_id)
        assert account.balance == Decimal("0.00")
