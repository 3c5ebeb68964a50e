"""Bank assignment pool and rotation tracker ORM models."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from giros.db.base import Base
from giros.db.models.transferencista import Transferencista

TRACKER_ROW_ID = 1


class BankAssignment(Base):
    """Membership of a transferencista in a bank's dispatch pool."""

    __tablename__ = "bank_assignments"
    __table_args__ = (
        UniqueConstraint(
            "bank_id",
            "transferencista_id",
            name="uq_bank_assignments_bank_transferencista",
        ),
    )

    # Autoincrement id doubles as insertion order for priority ties.
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    bank_id: Mapped[UUID] = mapped_column(ForeignKey("banks.id"), nullable=False)
    transferencista_id: Mapped[UUID] = mapped_column(
        ForeignKey("transferencistas.id"),
        nullable=False,
    )
    priority: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default="true",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    transferencista: Mapped[Transferencista] = relationship(Transferencista)


class AssignmentTracker(Base):
    """Singleton rotation cursor shared by all banks."""

    __tablename__ = "assignment_tracker"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=TRACKER_ROW_ID)
    last_assigned_index: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=-1,
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
