"""Schemas for minorista and bank ledger endpoints."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from giros.db.models.bank_account import BankAccount
from giros.db.models.bank_account_transaction import BankAccountTransaction
from giros.db.models.bank_assignment import BankAssignment
from giros.db.models.bank_transaction import BankTransaction
from giros.db.models.minorista import Minorista
from giros.db.models.minorista_transaction import MinoristaTransaction
from giros.domain.money import format_money

AMOUNT_PATTERN = r"^[0-9]+(\.[0-9]{1,2})?$"
SIGNED_AMOUNT_PATTERN = r"^-?[0-9]+(\.[0-9]{1,2})?$"


def _optional_money(value: Decimal | None) -> str | None:
    return format_money(value) if value is not None else None


class RechargeRequest(BaseModel):
    """Payload for funding a minorista account."""

    amount: str = Field(pattern=AMOUNT_PATTERN)
    created_by: str = Field(min_length=1, max_length=64)
    description: str | None = Field(default=None, max_length=280)
    to_balance_in_favor: bool = False


class AdjustmentRequest(BaseModel):
    """Payload for a signed manual correction."""

    amount: str = Field(pattern=SIGNED_AMOUNT_PATTERN)
    description: str = Field(min_length=1, max_length=280)
    created_by: str = Field(min_length=1, max_length=64)

    @field_validator("description")
    @classmethod
    def validate_description(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Description cannot be blank.")
        return trimmed


class MinoristaTransactionResponse(BaseModel):
    """Serialized minorista ledger entry."""

    id: UUID
    minorista_id: UUID
    sequence: int
    giro_id: UUID | None
    reverses_transaction_id: UUID | None
    type: str
    status: str
    amount: str
    previous_available_credit: str
    available_credit: str
    previous_balance_in_favor: str
    current_balance_in_favor: str
    previous_external_debt: str
    current_external_debt: str
    credit_consumed: str | None
    credit_used: str
    profit_earned: str
    balance_in_favor_used: str
    external_debt: str
    accumulated_debt: str
    remaining_balance: str
    description: str | None
    created_by: str
    created_at: datetime | None

    @classmethod
    def from_model(cls, entry: MinoristaTransaction) -> MinoristaTransactionResponse:
        return cls(
            id=entry.id,
            minorista_id=entry.minorista_id,
            sequence=entry.sequence,
            giro_id=entry.giro_id,
            reverses_transaction_id=entry.reverses_transaction_id,
            type=entry.type.value,
            status=entry.status.value,
            amount=format_money(entry.amount),
            previous_available_credit=format_money(entry.previous_available_credit),
            available_credit=format_money(entry.available_credit),
            previous_balance_in_favor=format_money(entry.previous_balance_in_favor),
            current_balance_in_favor=format_money(entry.current_balance_in_favor),
            previous_external_debt=format_money(entry.previous_external_debt),
            current_external_debt=format_money(entry.current_external_debt),
            credit_consumed=_optional_money(entry.credit_consumed),
            credit_used=format_money(entry.credit_used),
            profit_earned=format_money(entry.profit_earned),
            balance_in_favor_used=format_money(entry.balance_in_favor_used),
            external_debt=format_money(entry.external_debt),
            accumulated_debt=format_money(entry.accumulated_debt),
            remaining_balance=format_money(entry.remaining_balance),
            description=entry.description,
            created_by=entry.created_by,
            created_at=entry.created_at,
        )


class MinoristaTransactionListResponse(BaseModel):
    """Paginated ledger history."""

    items: list[MinoristaTransactionResponse]
    total: int
    limit: int
    offset: int

    @classmethod
    def from_models(
        cls,
        *,
        items: list[MinoristaTransaction],
        total: int,
        limit: int,
        offset: int,
    ) -> MinoristaTransactionListResponse:
        return cls(
            items=[MinoristaTransactionResponse.from_model(item) for item in items],
            total=total,
            limit=limit,
            offset=offset,
        )


class MinoristaBalanceResponse(BaseModel):
    """Live balances of a minorista account."""

    minorista_id: UUID
    credit_limit: str
    available_credit: str
    credit_balance: str
    external_debt: str
    accumulated_debt: str
    profit_percentage: str

    @classmethod
    def from_model(cls, minorista: Minorista) -> MinoristaBalanceResponse:
        accumulated = (
            minorista.credit_limit - minorista.available_credit
        ) + minorista.external_debt
        return cls(
            minorista_id=minorista.id,
            credit_limit=format_money(minorista.credit_limit),
            available_credit=format_money(minorista.available_credit),
            credit_balance=format_money(minorista.credit_balance),
            external_debt=format_money(minorista.external_debt),
            accumulated_debt=format_money(accumulated),
            profit_percentage=f"{minorista.profit_percentage:.4f}",
        )


class AccountMovementRequest(BaseModel):
    """Payload for a bank account deposit, withdrawal or adjustment."""

    type: Literal["DEPOSIT", "WITHDRAWAL", "ADJUSTMENT"]
    amount: str = Field(pattern=SIGNED_AMOUNT_PATTERN)
    fee: str = Field(default="0.00", pattern=AMOUNT_PATTERN)
    reference: str | None = Field(default=None, max_length=120)
    created_by: str = Field(min_length=1, max_length=64)


class BankAccountTransactionResponse(BaseModel):
    """Serialized bank account ledger entry."""

    id: UUID
    bank_account_id: UUID
    sequence: int
    type: str
    amount: str
    fee: str
    previous_balance: str
    current_balance: str
    reference: str | None
    giro_id: UUID | None
    created_by: str

    @classmethod
    def from_model(
        cls, entry: BankAccountTransaction
    ) -> BankAccountTransactionResponse:
        return cls(
            id=entry.id,
            bank_account_id=entry.bank_account_id,
            sequence=entry.sequence,
            type=entry.type.value,
            amount=format_money(entry.amount),
            fee=format_money(entry.fee),
            previous_balance=format_money(entry.previous_balance),
            current_balance=format_money(entry.current_balance),
            reference=entry.reference,
            giro_id=entry.giro_id,
            created_by=entry.created_by,
        )


class BankAccountResponse(BaseModel):
    """Serialized bank account with its live balance."""

    id: UUID
    bank_id: UUID
    owner_type: str
    transferencista_id: UUID | None
    account_holder: str
    account_type: str
    balance: str

    @classmethod
    def from_model(cls, account: BankAccount) -> BankAccountResponse:
        return cls(
            id=account.id,
            bank_id=account.bank_id,
            owner_type=account.owner_type.value,
            transferencista_id=account.transferencista_id,
            account_holder=account.account_holder,
            account_type=account.account_type.value,
            balance=format_money(account.balance),
        )


class BankNoteRequest(BaseModel):
    """Payload for a platform cash-flow note."""

    type: Literal["INFLOW", "OUTFLOW", "NOTE"]
    amount: str = Field(pattern=AMOUNT_PATTERN)
    description: str = Field(min_length=1, max_length=280)
    reference: str | None = Field(default=None, max_length=120)
    created_by: str = Field(min_length=1, max_length=64)


class BankNoteResponse(BaseModel):
    """Serialized cash-flow note."""

    id: UUID
    bank_id: UUID
    type: str
    amount: str
    description: str
    reference: str | None
    created_by: str

    @classmethod
    def from_model(cls, note: BankTransaction) -> BankNoteResponse:
        return cls(
            id=note.id,
            bank_id=note.bank_id,
            type=note.type.value,
            amount=format_money(note.amount),
            description=note.description,
            reference=note.reference,
            created_by=note.created_by,
        )


class BankNoteListResponse(BaseModel):
    """Paginated cash-flow notes of one bank."""

    items: list[BankNoteResponse]
    total: int
    limit: int
    offset: int


class AddAssignmentRequest(BaseModel):
    """Payload for adding a transferencista to a bank pool."""

    transferencista_id: UUID
    priority: int = Field(default=0, ge=0)
    is_active: bool = True


class UpdateAssignmentRequest(BaseModel):
    """Payload for enabling or disabling a pool membership."""

    is_active: bool


class UpdatePriorityRequest(BaseModel):
    """Payload for moving a pool member in rotation order."""

    priority: int = Field(ge=0)


class AssignmentResponse(BaseModel):
    """Serialized bank assignment."""

    id: int
    bank_id: UUID
    transferencista_id: UUID
    priority: int
    is_active: bool

    @classmethod
    def from_model(cls, assignment: BankAssignment) -> AssignmentResponse:
        return cls(
            id=assignment.id,
            bank_id=assignment.bank_id,
            transferencista_id=assignment.transferencista_id,
            priority=assignment.priority,
            is_active=assignment.is_active,
        )
