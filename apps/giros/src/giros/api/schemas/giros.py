"""Schemas for giro lifecycle endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from giros.api.schemas.rates import RateValuesPayload
from giros.db.models.giro import Giro
from giros.domain.money import format_money, format_rate

AMOUNT_PATTERN = r"^[0-9]+(\.[0-9]{1,2})?$"

CurrencyCode = Literal["VES", "COP", "USD"]
ExecutionKind = Literal[
    "TRANSFERENCIA", "PAGO_MOVIL", "EFECTIVO", "ZELLE", "OTROS", "RECARGA"
]


class CreateGiroRequest(BaseModel):
    """Payload for creating a giro."""

    beneficiary_name: str = Field(min_length=1, max_length=120)
    beneficiary_id: str = Field(min_length=1, max_length=32)
    bank_id: UUID
    account_number: str = Field(min_length=1, max_length=32)
    phone: str | None = Field(default=None, max_length=32)
    amount_input: str = Field(pattern=AMOUNT_PATTERN)
    currency_input: CurrencyCode
    execution_type: ExecutionKind = "TRANSFERENCIA"
    commission: str | None = Field(default=None, pattern=AMOUNT_PATTERN)
    minorista_id: UUID | None = None
    custom_rate: RateValuesPayload | None = None
    created_by: str = Field(min_length=1, max_length=64)

    @field_validator("beneficiary_name", "beneficiary_id", "account_number")
    @classmethod
    def validate_not_blank(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Field cannot be blank.")
        return trimmed


class CompleteGiroRequest(BaseModel):
    """Payload for settling a giro."""

    bank_account_id: UUID
    actor_id: str = Field(min_length=1, max_length=64)
    fee: str = Field(default="0.00", pattern=AMOUNT_PATTERN)
    execution_type: ExecutionKind | None = None
    commission: str | None = Field(default=None, pattern=AMOUNT_PATTERN)
    payment_proof_key: str | None = Field(default=None, max_length=255)


class CancelGiroRequest(BaseModel):
    """Payload for cancelling a giro."""

    actor_id: str = Field(min_length=1, max_length=64)


class ReturnGiroRequest(BaseModel):
    """Payload for returning a giro."""

    reason: str = Field(min_length=1, max_length=280)
    actor_id: str = Field(min_length=1, max_length=64)


class GiroResponse(BaseModel):
    """Serialized giro."""

    id: UUID
    status: str
    minorista_id: UUID | None
    transferencista_id: UUID | None
    bank_account_used_id: UUID | None
    beneficiary_name: str
    beneficiary_id: str
    bank_id: UUID
    bank_code: int
    account_number: str
    phone: str | None
    amount_input: str
    currency_input: str
    amount_bs: str
    rate_id: UUID
    bcv_value_applied: str
    commission: str | None
    system_profit: str
    minorista_profit: str
    execution_type: str
    return_reason: str | None
    payment_proof_key: str | None
    created_by: str
    assigned_at: datetime | None
    completed_at: datetime | None

    @classmethod
    def from_model(cls, giro: Giro) -> GiroResponse:
        return cls(
            id=giro.id,
            status=giro.status.value,
            minorista_id=giro.minorista_id,
            transferencista_id=giro.transferencista_id,
            bank_account_used_id=giro.bank_account_used_id,
            beneficiary_name=giro.beneficiary_name,
            beneficiary_id=giro.beneficiary_id,
            bank_id=giro.bank_id,
            bank_code=giro.bank_code,
            account_number=giro.account_number,
            phone=giro.phone,
            amount_input=format_money(giro.amount_input),
            currency_input=giro.currency_input.value,
            amount_bs=format_money(giro.amount_bs),
            rate_id=giro.rate_id,
            bcv_value_applied=format_rate(giro.bcv_value_applied),
            commission=(
                format_money(giro.commission) if giro.commission is not None else None
            ),
            system_profit=format_money(giro.system_profit),
            minorista_profit=format_money(giro.minorista_profit),
            execution_type=giro.execution_type.value,
            return_reason=giro.return_reason,
            payment_proof_key=giro.payment_proof_key,
            created_by=giro.created_by,
            assigned_at=giro.assigned_at,
            completed_at=giro.completed_at,
        )
