"""Giro lifecycle use cases.

Each public method is one storage transaction: the giro row is locked, the
transition is validated, ledger entries are posted through the recorder and
the whole unit commits or rolls back together. Notifications go out only
after a successful commit.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from giros.db.models.bank import Bank, Currency
from giros.db.models.bank_account import BankAccount
from giros.db.models.bank_account_transaction import BankAccountTransactionType
from giros.db.models.bank_assignment import BankAssignment
from giros.db.models.exchange_rate import ExchangeRate
from giros.db.models.giro import ExecutionType, Giro, GiroStatus
from giros.db.models.minorista import Minorista
from giros.db.models.minorista_transaction import (
    MinoristaTransaction,
    MinoristaTransactionStatus,
)
from giros.db.unit_of_work import SessionProtocol, transactional
from giros.domain.conversion import amount_in_bolivares
from giros.domain.errors import (
    NotFoundError,
    PreconditionFailedError,
    ValidationFailedError,
    compose_error_message,
)
from giros.domain.giro_lifecycle import GiroAction, ensure_transition
from giros.domain.money import ZERO, quantize_money
from giros.domain.profit import calculate_profit
from giros.services.ledger_recorder import LedgerRecorder
from giros.services.notifications import GiroNotifier, LoggingGiroNotifier, deliver
from giros.services.rate_book_service import RateValues

logger = logging.getLogger(__name__)

TRANSITION_EVENTS = {
    GiroAction.ASSIGN: "giro_assigned",
    GiroAction.START: "giro_processing_started",
    GiroAction.COMPLETE: "giro_completed",
    GiroAction.CANCEL: "giro_cancelled",
    GiroAction.RETURN: "giro_returned",
}


class GiroRepositoryProtocol(Protocol):
    """Giro repository contract consumed by service."""

    def get(self, giro_id: UUID) -> Giro | None: ...

    def get_for_update(self, giro_id: UUID) -> Giro | None: ...

    def add(self, giro: Giro) -> Giro: ...


class GiroLedgerLookupProtocol(Protocol):
    """Ledger lookups needed by giro transitions."""

    def get_minorista(self, minorista_id: UUID) -> Minorista | None: ...

    def get_bank_account(self, bank_account_id: UUID) -> BankAccount | None: ...

    def get_hold_for_giro(self, giro_id: UUID) -> MinoristaTransaction | None: ...


class BankLookupProtocol(Protocol):
    """Bank lookups needed when creating giros."""

    def get_bank(self, bank_id: UUID) -> Bank | None: ...


class RateSnapshotResolver(Protocol):
    """Rate book contract consumed when pricing a giro."""

    def resolve_snapshot(
        self,
        *,
        custom: RateValues | None,
        created_by: str,
    ) -> ExchangeRate: ...


class TransferencistaSelector(Protocol):
    """Dispatcher contract consumed when assigning a giro."""

    def select_transferencista(self, bank_id: UUID) -> BankAssignment: ...


@dataclass(slots=True, frozen=True)
class CreateGiroInput:
    """Input model for giro creation."""

    beneficiary_name: str
    beneficiary_id: str
    bank_id: UUID
    account_number: str
    amount_input: Decimal
    currency_input: Currency
    created_by: str
    minorista_id: UUID | None = None
    phone: str | None = None
    execution_type: ExecutionType = ExecutionType.TRANSFERENCIA
    commission: Decimal | None = None
    custom_rate: RateValues | None = None


@dataclass(slots=True, frozen=True)
class CompleteGiroInput:
    """Input model for settling a giro after the payment was made."""

    giro_id: UUID
    bank_account_id: UUID
    actor_id: str
    fee: Decimal = ZERO
    execution_type: ExecutionType | None = None
    commission: Decimal | None = None
    payment_proof_key: str | None = None


def _utcnow() -> datetime:
    return datetime.now(UTC)


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


class GiroService:
    """Drives giros from PENDIENTE to a terminal state."""

    def __init__(
        self,
        *,
        giro_repository: GiroRepositoryProtocol,
        ledger_repository: GiroLedgerLookupProtocol,
        bank_repository: BankLookupProtocol,
        rate_book: RateSnapshotResolver,
        dispatcher: TransferencistaSelector,
        recorder: LedgerRecorder,
        session: SessionProtocol,
        notifier: GiroNotifier | None = None,
        reserve_credit_on_create: bool = False,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._giro_repository = giro_repository
        self._ledger_repository = ledger_repository
        self._bank_repository = bank_repository
        self._rate_book = rate_book
        self._dispatcher = dispatcher
        self._recorder = recorder
        self._session = session
        self._notifier = notifier or LoggingGiroNotifier()
        self._reserve_credit_on_create = reserve_credit_on_create
        self._clock = clock

    def get_giro(self, giro_id: UUID) -> Giro:
        giro = self._giro_repository.get(giro_id)
        if giro is None:
            raise NotFoundError("Giro", giro_id)
        return giro

    def create_giro(self, payload: CreateGiroInput) -> Giro:
        """Price a new giro against a rate snapshot and store it PENDIENTE."""

        amount_input = quantize_money(payload.amount_input)
        if amount_input <= ZERO:
            raise ValidationFailedError(
                message=compose_error_message(
                    cause="amount_input must be greater than zero.",
                    action="Provide a positive decimal amount with two digits.",
                ),
                details={"field": "amount_input"},
            )
        if payload.commission is not None and payload.commission < ZERO:
            raise ValidationFailedError(
                message=compose_error_message(
                    cause="commission cannot be negative.",
                    action="Send a zero or positive commission.",
                ),
                details={"field": "commission"},
            )
        beneficiary_name = _required_text(
            payload.beneficiary_name, field="beneficiary_name"
        )
        beneficiary_id = _required_text(payload.beneficiary_id, field="beneficiary_id")
        account_number = _required_text(payload.account_number, field="account_number")
        created_by = _required_text(payload.created_by, field="created_by")

        with transactional(self._session):
            bank = self._bank_repository.get_bank(payload.bank_id)
            if bank is None:
                raise NotFoundError("Bank", payload.bank_id)
            if (
                payload.minorista_id is not None
                and self._ledger_repository.get_minorista(payload.minorista_id)
                is None
            ):
                raise NotFoundError("Minorista", payload.minorista_id)

            rate = self._rate_book.resolve_snapshot(
                custom=payload.custom_rate,
                created_by=created_by,
            )
            amount_bs = amount_in_bolivares(amount_input, payload.currency_input, rate)
            if amount_bs <= ZERO:
                raise ValidationFailedError(
                    message=compose_error_message(
                        cause="The amount converts to zero bolivares.",
                        action="Increase the amount or check the rate.",
                    ),
                    details={"field": "amount_input", "amount_bs": str(amount_bs)},
                )

            giro = self._giro_repository.add(
                Giro(
                    minorista_id=payload.minorista_id,
                    beneficiary_name=beneficiary_name,
                    beneficiary_id=beneficiary_id,
                    bank_id=bank.id,
                    account_number=account_number,
                    phone=payload.phone.strip() if payload.phone else None,
                    amount_input=amount_input,
                    currency_input=payload.currency_input,
                    amount_bs=amount_bs,
                    rate_id=rate.id,
                    bcv_value_applied=rate.bcv,
                    commission=(
                        quantize_money(payload.commission)
                        if payload.commission is not None
                        else None
                    ),
                    execution_type=payload.execution_type,
                    bank_code=bank.code,
                    status=GiroStatus.PENDIENTE,
                    created_by=created_by,
                )
            )
            if giro.minorista_id is not None and self._reserve_credit_on_create:
                self._recorder.post_discount(
                    minorista_id=giro.minorista_id,
                    giro_id=giro.id,
                    amount=amount_input,
                    created_by=created_by,
                    status=MinoristaTransactionStatus.PENDING,
                )

        logger.info(
            "giro_created",
            extra={
                "giro_id": str(giro.id),
                "minorista_id": str(giro.minorista_id),
                "amount_input": str(giro.amount_input),
                "currency_input": giro.currency_input.value,
                "amount_bs": str(giro.amount_bs),
                "rate_id": str(giro.rate_id),
            },
        )
        return giro

    def assign_giro(self, giro_id: UUID) -> Giro:
        """Hand the giro to the next transferencista of its bank pool."""

        with transactional(self._session):
            giro = self._lock(giro_id)
            target = ensure_transition(giro.status, GiroAction.ASSIGN)
            assignment = self._dispatcher.select_transferencista(giro.bank_id)
            giro.transferencista_id = assignment.transferencista_id
            giro.assigned_at = self._clock()
            giro.status = target

        self._log_transition(giro, GiroAction.ASSIGN)
        deliver(self._notifier.giro_assigned, giro)
        return giro

    def start_processing(self, giro_id: UUID) -> Giro:
        with transactional(self._session):
            giro = self._lock(giro_id)
            target = ensure_transition(giro.status, GiroAction.START)
            if giro.transferencista_id is None:
                raise PreconditionFailedError(
                    message=compose_error_message(
                        cause="The giro has no assigned transferencista.",
                        action="Assign the giro before starting it.",
                    ),
                    details={"missing": "transferencista"},
                )
            giro.status = target

        self._log_transition(giro, GiroAction.START)
        return giro

    def complete_giro(self, payload: CompleteGiroInput) -> Giro:
        """Settle the giro: fix profit, post the discount and the withdrawal."""

        actor_id = _required_text(payload.actor_id, field="actor_id")
        with transactional(self._session):
            giro = self._lock(payload.giro_id)
            target = ensure_transition(giro.status, GiroAction.COMPLETE)
            account = self._executing_account(giro, payload.bank_account_id)

            if payload.execution_type is not None:
                giro.execution_type = payload.execution_type
            if payload.commission is not None:
                giro.commission = quantize_money(payload.commission)

            minorista = (
                self._ledger_repository.get_minorista(giro.minorista_id)
                if giro.minorista_id is not None
                else None
            )
            profit = calculate_profit(
                giro.amount_input,
                giro.rate,
                giro.execution_type,
                minorista.profit_percentage if minorista is not None else None,
                commission=giro.commission,
            )
            giro.system_profit = profit.system_profit
            giro.minorista_profit = profit.minorista_profit

            if minorista is not None:
                hold = self._ledger_repository.get_hold_for_giro(giro.id)
                if hold is not None:
                    self._recorder.promote_hold(hold)
                else:
                    self._recorder.post_discount(
                        minorista_id=minorista.id,
                        giro_id=giro.id,
                        amount=giro.amount_input,
                        created_by=actor_id,
                        profit_percentage=minorista.profit_percentage,
                    )

            self._recorder.post_bank_account_entry(
                bank_account_id=account.id,
                movement_type=BankAccountTransactionType.WITHDRAWAL,
                amount=giro.amount_bs,
                fee=payload.fee,
                reference=f"Giro {giro.id}",
                giro_id=giro.id,
                created_by=actor_id,
            )

            giro.bank_account_used_id = account.id
            giro.payment_proof_key = payload.payment_proof_key
            giro.completed_at = self._clock()
            giro.status = target

        self._log_transition(giro, GiroAction.COMPLETE)
        deliver(self._notifier.giro_completed, giro)
        return giro

    def cancel_giro(self, giro_id: UUID, *, actor_id: str) -> Giro:
        """Cancel a non-terminal giro, voiding any reserved credit."""

        actor_id = _required_text(actor_id, field="actor_id")
        with transactional(self._session):
            giro = self._lock(giro_id)
            giro.status = ensure_transition(giro.status, GiroAction.CANCEL)
            self._void_hold(giro, actor_id=actor_id)

        self._log_transition(giro, GiroAction.CANCEL)
        deliver(self._notifier.giro_cancelled, giro)
        return giro

    def return_giro(self, giro_id: UUID, *, reason: str, actor_id: str) -> Giro:
        """Mark a failed delivery as DEVUELTO with its reason."""

        reason = _required_text(reason, field="reason")
        actor_id = _required_text(actor_id, field="actor_id")
        with transactional(self._session):
            giro = self._lock(giro_id)
            giro.status = ensure_transition(giro.status, GiroAction.RETURN)
            giro.return_reason = reason
            self._void_hold(giro, actor_id=actor_id)

        self._log_transition(giro, GiroAction.RETURN)
        deliver(self._notifier.giro_returned, giro)
        return giro

    def _lock(self, giro_id: UUID) -> Giro:
        giro = self._giro_repository.get_for_update(giro_id)
        if giro is None:
            raise NotFoundError("Giro", giro_id)
        return giro

    def _executing_account(self, giro: Giro, bank_account_id: UUID) -> BankAccount:
        if giro.transferencista_id is None:
            raise PreconditionFailedError(
                message=compose_error_message(
                    cause="The giro has no assigned transferencista.",
                    action="Assign the giro before completing it.",
                ),
                details={"missing": "transferencista"},
            )
        account = self._ledger_repository.get_bank_account(bank_account_id)
        if account is None:
            raise NotFoundError("BankAccount", bank_account_id)
        if account.transferencista_id != giro.transferencista_id:
            raise PreconditionFailedError(
                message=compose_error_message(
                    cause="The bank account does not belong to the assigned agent.",
                    action="Complete the giro from one of the agent's accounts.",
                ),
                details={"bank_account_id": str(bank_account_id)},
            )
        return account

    def _void_hold(self, giro: Giro, *, actor_id: str) -> None:
        hold = self._ledger_repository.get_hold_for_giro(giro.id)
        if hold is not None:
            self._recorder.void_hold(hold, created_by=actor_id)

    @staticmethod
    def _log_transition(giro: Giro, action: GiroAction) -> None:
        logger.info(
            TRANSITION_EVENTS[action],
            extra={"giro_id": str(giro.id), "status": giro.status.value},
        )
