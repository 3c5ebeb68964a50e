"""Rate book persistence operations."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from giros.db.models.exchange_rate import ExchangeRate


class ExchangeRateRepository:
    """Repository for append-only exchange rate snapshots."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, rate_id: UUID) -> ExchangeRate | None:
        return self._session.get(ExchangeRate, rate_id)

    def get_current(self) -> ExchangeRate | None:
        """Return the most recently published non-custom rate."""

        statement = (
            select(ExchangeRate)
            .where(ExchangeRate.is_custom.is_(False))
            .order_by(ExchangeRate.sequence.desc())
            .limit(1)
        )
        return self._session.scalar(statement)

    def add(self, rate: ExchangeRate) -> ExchangeRate:
        """Persist a snapshot as the next entry in publication order."""

        last = self._session.scalar(
            select(func.coalesce(func.max(ExchangeRate.sequence), 0))
        )
        rate.sequence = int(last or 0) + 1
        self._session.add(rate)
        self._session.flush()
        return rate
