"""Platform cash-flow note ORM model."""

from __future__ import annotations

import enum
from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Enum, ForeignKey, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from giros.db.base import Base


class BankTransactionType(enum.StrEnum):
    """Direction of a platform cash-flow note."""

    INFLOW = "INFLOW"
    OUTFLOW = "OUTFLOW"
    NOTE = "NOTE"


class BankTransaction(Base):
    """Bank-level note with no balance snapshot."""

    __tablename__ = "bank_transactions"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    bank_id: Mapped[UUID] = mapped_column(ForeignKey("banks.id"), nullable=False)
    type: Mapped[BankTransactionType] = mapped_column(
        Enum(
            BankTransactionType,
            name="bank_transaction_type",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    description: Mapped[str] = mapped_column(String(280), nullable=False)
    reference: Mapped[str | None] = mapped_column(String(120), nullable=True)
    created_by: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
