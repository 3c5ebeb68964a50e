"""Giro (money-transfer order) ORM model."""

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
    Index,
    Integer,
    Numeric,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from giros.db.base import Base
from giros.db.models.bank import Currency, currency_enum
from giros.db.models.exchange_rate import ExchangeRate


class GiroStatus(enum.StrEnum):
    """Lifecycle states of a giro."""

    PENDIENTE = "PENDIENTE"
    ASIGNADO = "ASIGNADO"
    PROCESANDO = "PROCESANDO"
    COMPLETADO = "COMPLETADO"
    CANCELADO = "CANCELADO"
    DEVUELTO = "DEVUELTO"


class ExecutionType(enum.StrEnum):
    """Channel a transferencista used to pay the beneficiary."""

    TRANSFERENCIA = "TRANSFERENCIA"
    PAGO_MOVIL = "PAGO_MOVIL"
    EFECTIVO = "EFECTIVO"
    ZELLE = "ZELLE"
    OTROS = "OTROS"
    RECARGA = "RECARGA"


class Giro(Base):
    """Money-transfer order priced against one rate snapshot."""

    __tablename__ = "giros"
    __table_args__ = (
        CheckConstraint("amount_input > 0", name="ck_giros_amount_input_positive"),
        CheckConstraint("amount_bs > 0", name="ck_giros_amount_bs_positive"),
        CheckConstraint(
            "status <> 'DEVUELTO' OR return_reason IS NOT NULL",
            name="ck_giros_returned_requires_reason",
        ),
        Index("ix_giros_status", "status"),
        Index("ix_giros_minorista_id", "minorista_id"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    minorista_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("minoristas.id", ondelete="SET NULL"),
        nullable=True,
    )
    transferencista_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("transferencistas.id"),
        nullable=True,
    )
    bank_account_used_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("bank_accounts.id"),
        nullable=True,
    )
    beneficiary_name: Mapped[str] = mapped_column(String(120), nullable=False)
    beneficiary_id: Mapped[str] = mapped_column(String(32), nullable=False)
    bank_id: Mapped[UUID] = mapped_column(ForeignKey("banks.id"), nullable=False)
    account_number: Mapped[str] = mapped_column(String(32), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    amount_input: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    currency_input: Mapped[Currency] = mapped_column(currency_enum, nullable=False)
    amount_bs: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    rate_id: Mapped[UUID] = mapped_column(
        ForeignKey("exchange_rates.id", ondelete="RESTRICT"),
        nullable=False,
    )
    bcv_value_applied: Mapped[Decimal] = mapped_column(
        Numeric(15, 4),
        nullable=False,
    )
    commission: Mapped[Decimal | None] = mapped_column(
        Numeric(18, 2),
        nullable=True,
    )
    system_profit: Mapped[Decimal] = mapped_column(
        Numeric(18, 2),
        nullable=False,
        default=Decimal("0.00"),
    )
    minorista_profit: Mapped[Decimal] = mapped_column(
        Numeric(18, 2),
        nullable=False,
        default=Decimal("0.00"),
    )
    execution_type: Mapped[ExecutionType] = mapped_column(
        Enum(
            ExecutionType,
            name="execution_type",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
    )
    bank_code: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[GiroStatus] = mapped_column(
        Enum(
            GiroStatus,
            name="giro_status",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
        default=GiroStatus.PENDIENTE,
    )
    return_reason: Mapped[str | None] = mapped_column(String(280), nullable=True)
    payment_proof_key: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    created_by: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
    assigned_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    rate: Mapped[ExchangeRate] = relationship(ExchangeRate)
