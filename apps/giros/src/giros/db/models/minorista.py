"""Minorista credit account ORM model."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, DateTime, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from giros.db.base import Base


class Minorista(Base):
    """Retail agent account: credit line, balance in favor and debt."""

    __tablename__ = "minoristas"
    __table_args__ = (
        CheckConstraint(
            "credit_balance >= 0",
            name="ck_minoristas_credit_balance_non_negative",
        ),
        CheckConstraint(
            "external_debt >= 0",
            name="ck_minoristas_external_debt_non_negative",
        ),
        CheckConstraint(
            "profit_percentage >= 0 AND profit_percentage <= 1",
            name="ck_minoristas_profit_percentage_range",
        ),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    full_name: Mapped[str] = mapped_column(String(120), nullable=False)
    credit_limit: Mapped[Decimal] = mapped_column(
        Numeric(18, 2),
        nullable=False,
        default=Decimal("0.00"),
    )
    available_credit: Mapped[Decimal] = mapped_column(
        Numeric(18, 2),
        nullable=False,
        default=Decimal("0.00"),
    )
    credit_balance: Mapped[Decimal] = mapped_column(
        Numeric(18, 2),
        nullable=False,
        default=Decimal("0.00"),
    )
    external_debt: Mapped[Decimal] = mapped_column(
        Numeric(18, 2),
        nullable=False,
        default=Decimal("0.00"),
    )
    profit_percentage: Mapped[Decimal] = mapped_column(
        Numeric(5, 4),
        nullable=False,
        default=Decimal("0.0500"),
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __mapper_args__ = {"version_id_col": version}
