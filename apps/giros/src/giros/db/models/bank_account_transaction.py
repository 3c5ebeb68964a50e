"""Bank account ledger entry ORM model."""

from __future__ import annotations

import enum
from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import (
    CheckConstraint,
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


class BankAccountTransactionType(enum.StrEnum):
    """Movements a bank account ledger accepts."""

    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    ADJUSTMENT = "ADJUSTMENT"


class BankAccountTransaction(Base):
    """Append-only entry with previous and current account balance."""

    __tablename__ = "bank_account_transactions"
    __table_args__ = (
        UniqueConstraint(
            "bank_account_id",
            "sequence",
            name="uq_bank_account_transactions_account_sequence",
        ),
        CheckConstraint("fee >= 0", name="ck_bank_account_transactions_fee"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    bank_account_id: Mapped[UUID] = mapped_column(
        ForeignKey("bank_accounts.id"),
        nullable=False,
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    type: Mapped[BankAccountTransactionType] = mapped_column(
        Enum(
            BankAccountTransactionType,
            name="bank_account_transaction_type",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    fee: Mapped[Decimal] = mapped_column(
        Numeric(18, 2),
        nullable=False,
        default=Decimal("0.00"),
    )
    previous_balance: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    current_balance: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    reference: Mapped[str | None] = mapped_column(String(120), nullable=True)
    giro_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("giros.id"),
        nullable=True,
    )
    created_by: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
