"""Appends ledger entries and keeps live account balances in step.

The recorder never commits. Every method runs inside the caller's
transaction, re-reads the account row under lock, writes the new live
balances and appends the entry with the next per-account sequence, so the
entry and the balance it implies become visible together or not at all.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from giros.db.models.bank_account import BankAccount
from giros.db.models.bank_account_transaction import (
    BankAccountTransaction,
    BankAccountTransactionType,
)
from giros.db.models.minorista import Minorista
from giros.db.models.minorista_transaction import (
    MinoristaTransaction,
    MinoristaTransactionStatus,
    MinoristaTransactionType,
)
from giros.domain.errors import (
    NotFoundError,
    PreconditionFailedError,
    ValidationFailedError,
    compose_error_message,
)
from giros.domain.ledger_math import (
    HoldComponents,
    MinoristaBalances,
    MinoristaPosting,
    apply_adjustment,
    apply_bank_movement,
    apply_discount,
    apply_hold_reversal,
    apply_recharge,
)
from giros.domain.money import ZERO, quantize_money

logger = logging.getLogger(__name__)


class LedgerRepositoryProtocol(Protocol):
    """Ledger repository contract consumed by the recorder."""

    def get_minorista_for_update(self, minorista_id: UUID) -> Minorista | None: ...

    def get_bank_account_for_update(
        self, bank_account_id: UUID
    ) -> BankAccount | None: ...

    def next_minorista_sequence(self, minorista_id: UUID) -> int: ...

    def next_bank_account_sequence(self, bank_account_id: UUID) -> int: ...

    def add_minorista_transaction(
        self, entry: MinoristaTransaction
    ) -> MinoristaTransaction: ...

    def add_bank_account_transaction(
        self, entry: BankAccountTransaction
    ) -> BankAccountTransaction: ...


def _positive_amount(amount: Decimal, *, field: str = "amount") -> Decimal:
    amount = quantize_money(amount)
    if amount <= ZERO:
        raise ValidationFailedError(
            message=compose_error_message(
                cause=f"{field} must be greater than zero.",
                action="Provide a positive decimal amount with two digits.",
            ),
            details={"field": field},
        )
    return amount


def _required_text(value: str | None, *, field: str) -> str:
    trimmed = (value or "").strip()
    if not trimmed:
        raise ValidationFailedError(
            message=compose_error_message(
                cause=f"{field} cannot be blank.",
                action=f"Provide {field} and retry.",
            ),
            details={"field": field},
        )
    return trimmed


def balances_of(minorista: Minorista) -> MinoristaBalances:
    """Snapshot the live balances of a locked minorista row."""

    return MinoristaBalances(
        credit_limit=minorista.credit_limit,
        available_credit=minorista.available_credit,
        credit_balance=minorista.credit_balance,
        external_debt=minorista.external_debt,
    )


class LedgerRecorder:
    """Writes minorista and bank account ledger entries."""

    def __init__(self, *, ledger_repository: LedgerRepositoryProtocol) -> None:
        self._ledger_repository = ledger_repository

    def post_recharge(
        self,
        *,
        minorista_id: UUID,
        amount: Decimal,
        created_by: str,
        description: str | None = None,
        to_balance_in_favor: bool = False,
    ) -> MinoristaTransaction:
        amount = _positive_amount(amount)
        created_by = _required_text(created_by, field="created_by")
        minorista = self._lock_minorista(minorista_id)
        posting = apply_recharge(
            balances_of(minorista),
            amount,
            to_balance_in_favor=to_balance_in_favor,
        )
        return self._append(
            minorista,
            posting,
            entry_type=MinoristaTransactionType.RECHARGE,
            status=MinoristaTransactionStatus.COMPLETED,
            amount=amount,
            created_by=created_by,
            description=description,
        )

    def post_adjustment(
        self,
        *,
        minorista_id: UUID,
        amount: Decimal,
        description: str,
        created_by: str,
    ) -> MinoristaTransaction:
        """Post a signed manual correction attributed to an authorizing user."""

        amount = quantize_money(amount)
        if amount == ZERO:
            raise ValidationFailedError(
                message=compose_error_message(
                    cause="Adjustment amount cannot be zero.",
                    action="Send a positive or negative amount.",
                ),
                details={"field": "amount"},
            )
        description = _required_text(description, field="description")
        created_by = _required_text(created_by, field="created_by")
        minorista = self._lock_minorista(minorista_id)
        posting = apply_adjustment(balances_of(minorista), amount)
        return self._append(
            minorista,
            posting,
            entry_type=MinoristaTransactionType.ADJUSTMENT,
            status=MinoristaTransactionStatus.COMPLETED,
            amount=amount,
            created_by=created_by,
            description=description,
        )

    def post_discount(
        self,
        *,
        minorista_id: UUID,
        giro_id: UUID,
        amount: Decimal,
        created_by: str,
        status: MinoristaTransactionStatus = MinoristaTransactionStatus.COMPLETED,
        profit_percentage: Decimal | None = None,
    ) -> MinoristaTransaction:
        """Charge a giro to the minorista; PENDING status reserves a hold."""

        if status == MinoristaTransactionStatus.CANCELLED:
            raise ValueError("A discount cannot be posted as CANCELLED")
        amount = _positive_amount(amount)
        minorista = self._lock_minorista(minorista_id)
        percentage = (
            minorista.profit_percentage
            if profit_percentage is None
            else profit_percentage
        )
        posting = apply_discount(balances_of(minorista), amount, percentage)
        return self._append(
            minorista,
            posting,
            entry_type=MinoristaTransactionType.DISCOUNT,
            status=status,
            amount=amount,
            created_by=created_by,
            description=f"Giro {giro_id}",
            giro_id=giro_id,
        )

    def promote_hold(self, hold: MinoristaTransaction) -> MinoristaTransaction:
        """Settle a reserved discount; balances already reflect it."""

        self._ensure_pending(hold)
        hold.status = MinoristaTransactionStatus.COMPLETED
        logger.info(
            "ledger_hold_completed",
            extra={"entry_id": str(hold.id), "giro_id": str(hold.giro_id)},
        )
        return hold

    def void_hold(
        self,
        hold: MinoristaTransaction,
        *,
        created_by: str,
    ) -> MinoristaTransaction:
        """Cancel a reserved discount and post its compensating entry."""

        self._ensure_pending(hold)
        minorista = self._lock_minorista(hold.minorista_id)
        hold.status = MinoristaTransactionStatus.CANCELLED
        posting = apply_hold_reversal(
            balances_of(minorista),
            HoldComponents(
                credit_used=hold.credit_used,
                balance_in_favor_used=hold.balance_in_favor_used,
                external_debt=hold.external_debt,
                profit_earned=hold.profit_earned,
            ),
        )
        return self._append(
            minorista,
            posting,
            entry_type=MinoristaTransactionType.ADJUSTMENT,
            status=MinoristaTransactionStatus.COMPLETED,
            amount=hold.amount,
            created_by=created_by,
            description=f"Reversal of hold for giro {hold.giro_id}",
            reverses_transaction_id=hold.id,
        )

    def realign_minorista(
        self,
        *,
        minorista_id: UUID,
        balances: MinoristaBalances,
    ) -> Minorista:
        """Overwrite live balances with the ledger projection.

        Used only by balance repair. No entry is appended, because the
        ledger already records the balances being restored.
        """

        minorista = self._lock_minorista(minorista_id)
        previous = balances_of(minorista)
        minorista.available_credit = balances.available_credit
        minorista.credit_balance = balances.credit_balance
        minorista.external_debt = balances.external_debt
        logger.warning(
            "ledger_balances_realigned",
            extra={
                "minorista_id": str(minorista_id),
                "previous_available_credit": str(previous.available_credit),
                "available_credit": str(balances.available_credit),
                "previous_credit_balance": str(previous.credit_balance),
                "credit_balance": str(balances.credit_balance),
            },
        )
        return minorista

    def post_bank_account_entry(
        self,
        *,
        bank_account_id: UUID,
        movement_type: BankAccountTransactionType,
        amount: Decimal,
        created_by: str,
        fee: Decimal = ZERO,
        reference: str | None = None,
        giro_id: UUID | None = None,
    ) -> BankAccountTransaction:
        """Move money on a bank account; refuses to leave it negative."""

        created_by = _required_text(created_by, field="created_by")
        account = self._ledger_repository.get_bank_account_for_update(
            bank_account_id
        )
        if account is None:
            raise NotFoundError("BankAccount", bank_account_id)

        previous_balance = account.balance
        try:
            current_balance = apply_bank_movement(
                previous_balance, movement_type, amount, fee
            )
        except ValueError as exc:
            raise ValidationFailedError(
                message=compose_error_message(
                    cause=str(exc) + ".",
                    action="Correct the movement amount or fee.",
                ),
                details={"movement_type": movement_type.value},
            ) from exc

        account.balance = current_balance
        entry = self._ledger_repository.add_bank_account_transaction(
            BankAccountTransaction(
                bank_account_id=account.id,
                sequence=self._ledger_repository.next_bank_account_sequence(
                    account.id
                ),
                type=movement_type,
                amount=quantize_money(amount),
                fee=quantize_money(fee),
                previous_balance=previous_balance,
                current_balance=current_balance,
                reference=reference,
                giro_id=giro_id,
                created_by=created_by,
            )
        )
        logger.info(
            "bank_account_entry_posted",
            extra={
                "bank_account_id": str(account.id),
                "sequence": entry.sequence,
                "type": movement_type.value,
                "amount": str(entry.amount),
                "current_balance": str(current_balance),
            },
        )
        return entry

    def _lock_minorista(self, minorista_id: UUID) -> Minorista:
        minorista = self._ledger_repository.get_minorista_for_update(minorista_id)
        if minorista is None:
            raise NotFoundError("Minorista", minorista_id)
        return minorista

    @staticmethod
    def _ensure_pending(entry: MinoristaTransaction) -> None:
        if entry.status != MinoristaTransactionStatus.PENDING:
            raise PreconditionFailedError(
                message=compose_error_message(
                    cause=f"Ledger entry is {entry.status.value}, not PENDING.",
                    action="Settled entries are immutable; post a new entry.",
                ),
                details={"entry_id": str(entry.id)},
            )

    def _append(
        self,
        minorista: Minorista,
        posting: MinoristaPosting,
        *,
        entry_type: MinoristaTransactionType,
        status: MinoristaTransactionStatus,
        amount: Decimal,
        created_by: str,
        description: str | None = None,
        giro_id: UUID | None = None,
        reverses_transaction_id: UUID | None = None,
    ) -> MinoristaTransaction:
        before, after = posting.before, posting.after
        minorista.available_credit = after.available_credit
        minorista.credit_balance = after.credit_balance
        minorista.external_debt = after.external_debt

        entry = self._ledger_repository.add_minorista_transaction(
            MinoristaTransaction(
                minorista_id=minorista.id,
                sequence=self._ledger_repository.next_minorista_sequence(
                    minorista.id
                ),
                giro_id=giro_id,
                reverses_transaction_id=reverses_transaction_id,
                type=entry_type,
                status=status,
                amount=amount,
                previous_available_credit=before.available_credit,
                available_credit=after.available_credit,
                previous_balance_in_favor=before.credit_balance,
                current_balance_in_favor=after.credit_balance,
                previous_external_debt=before.external_debt,
                current_external_debt=after.external_debt,
                credit_consumed=posting.credit_consumed,
                credit_used=posting.credit_used,
                profit_earned=posting.profit_earned,
                balance_in_favor_used=posting.balance_in_favor_used,
                external_debt=posting.external_debt,
                accumulated_debt=after.accumulated_debt,
                remaining_balance=after.remaining_balance,
                description=description,
                created_by=created_by,
            )
        )
        logger.info(
            "ledger_entry_posted",
            extra={
                "minorista_id": str(minorista.id),
                "sequence": entry.sequence,
                "type": entry_type.value,
                "status": status.value,
                "amount": str(amount),
                "available_credit": str(after.available_credit),
                "credit_balance": str(after.credit_balance),
                "external_debt": str(after.external_debt),
            },
        )
        return entry
