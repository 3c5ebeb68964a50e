"""Minorista ledger entry ORM model."""

from __future__ import annotations

import enum
from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import (
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from giros.db.base import Base


class MinoristaTransactionType(enum.StrEnum):
    """Kinds of minorista ledger entries."""

    RECHARGE = "RECHARGE"
    DISCOUNT = "DISCOUNT"
    ADJUSTMENT = "ADJUSTMENT"


class MinoristaTransactionStatus(enum.StrEnum):
    """Entry status; only PENDING entries may move to another status."""

    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


def _money_column(*, nullable: bool = False) -> Mapped[Decimal]:
    return mapped_column(Numeric(18, 2), nullable=nullable)


class MinoristaTransaction(Base):
    """Append-only entry carrying before/after balances of a minorista."""

    __tablename__ = "minorista_transactions"
    __table_args__ = (
        UniqueConstraint(
            "minorista_id",
            "sequence",
            name="uq_minorista_transactions_minorista_sequence",
        ),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    minorista_id: Mapped[UUID] = mapped_column(
        ForeignKey("minoristas.id"),
        nullable=False,
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    giro_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("giros.id", ondelete="CASCADE"),
        nullable=True,
        unique=True,
    )
    reverses_transaction_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("minorista_transactions.id"),
        nullable=True,
    )
    type: Mapped[MinoristaTransactionType] = mapped_column(
        Enum(
            MinoristaTransactionType,
            name="minorista_transaction_type",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
    )
    status: Mapped[MinoristaTransactionStatus] = mapped_column(
        Enum(
            MinoristaTransactionStatus,
            name="minorista_transaction_status",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
    )
    amount: Mapped[Decimal] = _money_column()
    previous_available_credit: Mapped[Decimal] = _money_column()
    available_credit: Mapped[Decimal] = _money_column()
    previous_balance_in_favor: Mapped[Decimal] = _money_column()
    current_balance_in_favor: Mapped[Decimal] = _money_column()
    previous_external_debt: Mapped[Decimal] = _money_column()
    current_external_debt: Mapped[Decimal] = _money_column()
    credit_consumed: Mapped[Decimal | None] = _money_column(nullable=True)
    credit_used: Mapped[Decimal] = _money_column()
    profit_earned: Mapped[Decimal] = _money_column()
    balance_in_favor_used: Mapped[Decimal] = _money_column()
    external_debt: Mapped[Decimal] = _money_column()
    accumulated_debt: Mapped[Decimal] = _money_column()
    remaining_balance: Mapped[Decimal] = _money_column()
    description: Mapped[str | None] = mapped_column(String(280), nullable=True)
    created_by: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
