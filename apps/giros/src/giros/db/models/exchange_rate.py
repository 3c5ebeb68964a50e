"""Exchange rate (rate book entry) ORM model."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from giros.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ExchangeRate(Base):
    """Immutable rate snapshot a giro is priced against."""

    __tablename__ = "exchange_rates"
    __table_args__ = (
        CheckConstraint(
            "buy_rate > 0 AND sell_rate > 0 AND usd > 0 AND bcv > 0",
            name="ck_exchange_rates_positive",
        ),
        UniqueConstraint("sequence", name="uq_exchange_rates_sequence"),
        Index("ix_exchange_rates_is_custom_sequence", "is_custom", "sequence"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    # Publication order; "current" is the highest non-custom sequence.
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    buy_rate: Mapped[Decimal] = mapped_column(Numeric(15, 4), nullable=False)
    sell_rate: Mapped[Decimal] = mapped_column(Numeric(15, 4), nullable=False)
    usd: Mapped[Decimal] = mapped_column(Numeric(15, 4), nullable=False)
    bcv: Mapped[Decimal] = mapped_column(Numeric(15, 4), nullable=False)
    is_custom: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default="false",
    )
    created_by: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
