"""Bank account ORM model with live balance."""

from __future__ import annotations

import enum
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import Enum, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from giros.db.base import Base
from giros.db.models.bank import Bank


class AccountOwnerType(enum.StrEnum):
    """Who holds a bank account."""

    PLATFORM = "PLATFORM"
    TRANSFERENCISTA = "TRANSFERENCISTA"


class AccountType(enum.StrEnum):
    """Venezuelan account kinds."""

    AHORROS = "AHORROS"
    CORRIENTE = "CORRIENTE"


class BankAccount(Base):
    """Account whose balance is only written by ledger entries."""

    __tablename__ = "bank_accounts"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    bank_id: Mapped[UUID] = mapped_column(ForeignKey("banks.id"), nullable=False)
    owner_type: Mapped[AccountOwnerType] = mapped_column(
        Enum(
            AccountOwnerType,
            name="account_owner_type",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
    )
    transferencista_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("transferencistas.id"),
        nullable=True,
    )
    account_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    account_holder: Mapped[str] = mapped_column(String(120), nullable=False)
    account_type: Mapped[AccountType] = mapped_column(
        Enum(
            AccountType,
            name="account_type",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
    )
    balance: Mapped[Decimal] = mapped_column(
        Numeric(18, 2),
        nullable=False,
        default=Decimal("0.00"),
        server_default="0",
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    bank: Mapped[Bank] = relationship(Bank)

    __mapper_args__ = {"version_id_col": version}
