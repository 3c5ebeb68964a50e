"""Bank ORM model."""

from __future__ import annotations

import enum
from uuid import UUID, uuid4

from sqlalchemy import Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from giros.db.base import Base


class Currency(enum.StrEnum):
    """Currencies a giro amount or bank can be denominated in."""

    VES = "VES"
    COP = "COP"
    USD = "USD"


currency_enum = Enum(
    Currency,
    name="currency",
    values_callable=lambda enum_cls: [member.value for member in enum_cls],
    validate_strings=True,
)


class Bank(Base):
    """Destination or settlement bank."""

    __tablename__ = "banks"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    currency: Mapped[Currency] = mapped_column(currency_enum, nullable=False)
    code: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
