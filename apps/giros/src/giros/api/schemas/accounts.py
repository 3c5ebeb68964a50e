"""Schemas for provisioning endpoints."""

from __future__ import annotations

from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from giros.db.models.bank import Bank
from giros.db.models.transferencista import Transferencista

AMOUNT_PATTERN = r"^[0-9]+(\.[0-9]{1,2})?$"
PERCENTAGE_PATTERN = r"^[0-9](\.[0-9]{1,4})?$"


class CreateBankRequest(BaseModel):
    """Payload for registering a bank."""

    name: str = Field(min_length=1, max_length=120)
    code: int = Field(gt=0)
    currency: Literal["VES", "COP", "USD"] = "VES"


class BankResponse(BaseModel):
    """Serialized bank."""

    id: UUID
    name: str
    code: int
    currency: str

    @classmethod
    def from_model(cls, bank: Bank) -> BankResponse:
        return cls(
            id=bank.id,
            name=bank.name,
            code=bank.code,
            currency=bank.currency.value,
        )


class CreateTransferencistaRequest(BaseModel):
    """Payload for registering a field agent."""

    full_name: str = Field(min_length=1, max_length=120)
    available: bool = True


class UpdateAvailabilityRequest(BaseModel):
    """Payload for taking an agent in or out of dispatch."""

    available: bool


class TransferencistaResponse(BaseModel):
    """Serialized field agent."""

    id: UUID
    full_name: str
    available: bool

    @classmethod
    def from_model(cls, transferencista: Transferencista) -> TransferencistaResponse:
        return cls(
            id=transferencista.id,
            full_name=transferencista.full_name,
            available=transferencista.available,
        )


class CreateBankAccountRequest(BaseModel):
    """Payload for opening a bank account."""

    bank_id: UUID
    owner_type: Literal["PLATFORM", "TRANSFERENCISTA"]
    transferencista_id: UUID | None = None
    account_number: str | None = Field(default=None, min_length=1, max_length=32)
    account_holder: str = Field(min_length=1, max_length=120)
    account_type: Literal["AHORROS", "CORRIENTE"] = "AHORROS"


class CreateMinoristaRequest(BaseModel):
    """Payload for opening a minorista credit account."""

    full_name: str = Field(min_length=1, max_length=120)
    credit_limit: str = Field(pattern=AMOUNT_PATTERN)
    profit_percentage: str = Field(default="0.05", pattern=PERCENTAGE_PATTERN)

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Full name cannot be blank.")
        return trimmed


class UpdateProfitPercentageRequest(BaseModel):
    """Payload for changing a minorista's profit share."""

    profit_percentage: str = Field(pattern=PERCENTAGE_PATTERN)
