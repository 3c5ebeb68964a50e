"""Schemas for rate book endpoints."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from giros.db.models.exchange_rate import ExchangeRate
from giros.domain.money import format_rate

RATE_PATTERN = r"^[0-9]+(\.[0-9]{1,4})?$"


class RateValuesPayload(BaseModel):
    """Four quotes of a rate snapshot, as decimal strings."""

    buy_rate: str = Field(pattern=RATE_PATTERN)
    sell_rate: str = Field(pattern=RATE_PATTERN)
    usd: str = Field(pattern=RATE_PATTERN)
    bcv: str = Field(pattern=RATE_PATTERN)


class PublishRateRequest(RateValuesPayload):
    """Payload for publishing the current rate."""

    created_by: str = Field(min_length=1, max_length=64)


class RateResponse(BaseModel):
    """Serialized rate snapshot."""

    id: UUID
    buy_rate: str
    sell_rate: str
    usd: str
    bcv: str
    is_custom: bool
    created_by: str
    created_at: datetime

    @classmethod
    def from_model(cls, rate: ExchangeRate) -> RateResponse:
        return cls(
            id=rate.id,
            buy_rate=format_rate(rate.buy_rate),
            sell_rate=format_rate(rate.sell_rate),
            usd=format_rate(rate.usd),
            bcv=format_rate(rate.bcv),
            is_custom=rate.is_custom,
            created_by=rate.created_by,
            created_at=rate.created_at,
        )
