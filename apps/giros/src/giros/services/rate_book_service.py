"""Rate book use cases."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from giros.db.models.exchange_rate import ExchangeRate
from giros.db.unit_of_work import SessionProtocol, transactional
from giros.domain.errors import (
    NotFoundError,
    PreconditionFailedError,
    ValidationFailedError,
    compose_error_message,
)
from giros.domain.money import quantize_rate

logger = logging.getLogger(__name__)


class ExchangeRateRepositoryProtocol(Protocol):
    """Exchange rate repository contract consumed by the rate book."""

    def get(self, rate_id: UUID) -> ExchangeRate | None: ...

    def get_current(self) -> ExchangeRate | None: ...

    def add(self, rate: ExchangeRate) -> ExchangeRate: ...


@dataclass(slots=True, frozen=True)
class RateValues:
    """The four quotes that make up a rate snapshot."""

    buy_rate: Decimal
    sell_rate: Decimal
    usd: Decimal
    bcv: Decimal


def _validated(values: RateValues) -> RateValues:
    quantized = RateValues(
        buy_rate=quantize_rate(values.buy_rate),
        sell_rate=quantize_rate(values.sell_rate),
        usd=quantize_rate(values.usd),
        bcv=quantize_rate(values.bcv),
    )
    invalid = [
        name
        for name in ("buy_rate", "sell_rate", "usd", "bcv")
        if getattr(quantized, name) <= Decimal("0")
    ]
    if invalid:
        raise ValidationFailedError(
            message=compose_error_message(
                cause="Every rate must be greater than zero.",
                action="Send positive values with up to four decimals.",
            ),
            details={"fields": invalid},
        )
    return quantized


class RateBookService:
    """Publishes rates and resolves the snapshot a giro is priced against."""

    def __init__(
        self,
        *,
        exchange_rate_repository: ExchangeRateRepositoryProtocol,
        session: SessionProtocol,
    ) -> None:
        self._exchange_rate_repository = exchange_rate_repository
        self._session = session

    def publish_rate(self, values: RateValues, *, created_by: str) -> ExchangeRate:
        """Record a new current rate; earlier snapshots stay untouched."""

        with transactional(self._session):
            rate = self._add_snapshot(values, created_by=created_by, is_custom=False)
        logger.info(
            "rate_published",
            extra={
                "rate_id": str(rate.id),
                "buy_rate": str(rate.buy_rate),
                "sell_rate": str(rate.sell_rate),
                "bcv": str(rate.bcv),
            },
        )
        return rate

    def get_current_rate(self) -> ExchangeRate:
        rate = self._exchange_rate_repository.get_current()
        if rate is None:
            raise NotFoundError("ExchangeRate", "current")
        return rate

    def get_rate(self, rate_id: UUID) -> ExchangeRate:
        rate = self._exchange_rate_repository.get(rate_id)
        if rate is None:
            raise NotFoundError("ExchangeRate", rate_id)
        return rate

    def resolve_snapshot(
        self,
        *,
        custom: RateValues | None,
        created_by: str,
    ) -> ExchangeRate:
        """Return the snapshot for a new giro inside the caller's transaction.

        A custom quote becomes its own ``is_custom`` snapshot so it never
        shadows the current rate; otherwise the current rate is used.
        """

        if custom is not None:
            return self._add_snapshot(custom, created_by=created_by, is_custom=True)

        rate = self._exchange_rate_repository.get_current()
        if rate is None:
            raise PreconditionFailedError(
                message=compose_error_message(
                    cause="No exchange rate has been published yet.",
                    action="Publish the current rate before creating giros.",
                ),
                details={"missing": "rate"},
            )
        return rate

    def _add_snapshot(
        self,
        values: RateValues,
        *,
        created_by: str,
        is_custom: bool,
    ) -> ExchangeRate:
        quantized = _validated(values)
        return self._exchange_rate_repository.add(
            ExchangeRate(
                buy_rate=quantized.buy_rate,
                sell_rate=quantized.sell_rate,
                usd=quantized.usd,
                bcv=quantized.bcv,
                is_custom=is_custom,
                created_by=created_by,
            )
        )
