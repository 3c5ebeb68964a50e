"""Bank account movements and platform cash-flow notes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from giros.db.models.bank import Bank
from giros.db.models.bank_account import BankAccount
from giros.db.models.bank_account_transaction import (
    BankAccountTransaction,
    BankAccountTransactionType,
)
from giros.db.models.bank_transaction import BankTransaction, BankTransactionType
from giros.db.unit_of_work import SessionProtocol, transactional
from giros.domain.errors import (
    NotFoundError,
    ValidationFailedError,
    compose_error_message,
)
from giros.domain.money import ZERO, quantize_money
from giros.repositories.bank_repository import BankTransactionFilters
from giros.services.ledger_recorder import LedgerRecorder

logger = logging.getLogger(__name__)


class BankRepositoryProtocol(Protocol):
    """Bank repository contract consumed by this service."""

    def get_bank(self, bank_id: UUID) -> Bank | None: ...

    def add_bank_transaction(self, note: BankTransaction) -> BankTransaction: ...

    def list_bank_transactions(
        self,
        filters: BankTransactionFilters,
    ) -> tuple[list[BankTransaction], int]: ...


class BankAccountLedgerProtocol(Protocol):
    """Bank account ledger queries consumed by this service."""

    def get_bank_account(self, bank_account_id: UUID) -> BankAccount | None: ...

    def list_bank_account_entries(
        self, bank_account_id: UUID
    ) -> list[BankAccountTransaction]: ...


@dataclass(slots=True, frozen=True)
class AccountMovementInput:
    """Input model for a deposit, withdrawal or adjustment."""

    bank_account_id: UUID
    movement_type: BankAccountTransactionType
    amount: Decimal
    created_by: str
    fee: Decimal = ZERO
    reference: str | None = None


@dataclass(slots=True, frozen=True)
class BankNoteInput:
    """Input model for a platform cash-flow note."""

    bank_id: UUID
    note_type: BankTransactionType
    amount: Decimal
    description: str
    created_by: str
    reference: str | None = None


class BankLedgerService:
    """Coordinates bank account ledger use cases."""

    def __init__(
        self,
        *,
        bank_repository: BankRepositoryProtocol,
        ledger_repository: BankAccountLedgerProtocol,
        recorder: LedgerRecorder,
        session: SessionProtocol,
    ) -> None:
        self._bank_repository = bank_repository
        self._ledger_repository = ledger_repository
        self._recorder = recorder
        self._session = session

    def post_movement(self, payload: AccountMovementInput) -> BankAccountTransaction:
        with transactional(self._session):
            return self._recorder.post_bank_account_entry(
                bank_account_id=payload.bank_account_id,
                movement_type=payload.movement_type,
                amount=payload.amount,
                fee=payload.fee,
                reference=payload.reference,
                created_by=payload.created_by,
            )

    def get_account(self, bank_account_id: UUID) -> BankAccount:
        account = self._ledger_repository.get_bank_account(bank_account_id)
        if account is None:
            raise NotFoundError("BankAccount", bank_account_id)
        return account

    def list_account_entries(
        self, bank_account_id: UUID
    ) -> list[BankAccountTransaction]:
        self.get_account(bank_account_id)
        return self._ledger_repository.list_bank_account_entries(bank_account_id)

    def record_note(self, payload: BankNoteInput) -> BankTransaction:
        """Record a bank-level inflow, outflow or note; no balance moves."""

        amount = quantize_money(payload.amount)
        if amount < ZERO:
            raise ValidationFailedError(
                message=compose_error_message(
                    cause="Cash-flow note amount cannot be negative.",
                    action="Use OUTFLOW for money leaving the bank.",
                ),
                details={"field": "amount"},
            )
        description = payload.description.strip()
        if not description:
            raise ValidationFailedError(
                message=compose_error_message(
                    cause="description cannot be blank.",
                    action="Describe the cash movement and retry.",
                ),
                details={"field": "description"},
            )

        with transactional(self._session):
            if self._bank_repository.get_bank(payload.bank_id) is None:
                raise NotFoundError("Bank", payload.bank_id)
            note = self._bank_repository.add_bank_transaction(
                BankTransaction(
                    bank_id=payload.bank_id,
                    type=payload.note_type,
                    amount=amount,
                    description=description,
                    reference=payload.reference,
                    created_by=payload.created_by,
                )
            )
        logger.info(
            "bank_note_recorded",
            extra={
                "bank_id": str(payload.bank_id),
                "type": payload.note_type.value,
                "amount": str(amount),
            },
        )
        return note

    def list_notes(
        self,
        bank_id: UUID,
        *,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[BankTransaction], int]:
        if self._bank_repository.get_bank(bank_id) is None:
            raise NotFoundError("Bank", bank_id)
        return self._bank_repository.list_bank_transactions(
            BankTransactionFilters(bank_id=bank_id, limit=limit, offset=offset)
        )
