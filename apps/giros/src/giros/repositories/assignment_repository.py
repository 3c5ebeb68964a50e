"""Dispatch pool and rotation tracker persistence operations."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from giros.db.models.bank_assignment import (
    TRACKER_ROW_ID,
    AssignmentTracker,
    BankAssignment,
)
from giros.db.models.transferencista import Transferencista


class AssignmentRepository:
    """Repository for bank assignments and the shared rotation cursor."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_eligible(self, bank_id: UUID) -> list[BankAssignment]:
        """Return the bank's dispatch pool in rotation order.

        Only active assignments of available transferencistas count; ties on
        priority fall back to insertion order.
        """

        statement = (
            select(BankAssignment)
            .join(
                Transferencista,
                Transferencista.id == BankAssignment.transferencista_id,
            )
            .where(
                BankAssignment.bank_id == bank_id,
                BankAssignment.is_active.is_(True),
                Transferencista.available.is_(True),
            )
            .order_by(BankAssignment.priority.asc(), BankAssignment.id.asc())
        )
        return list(self._session.scalars(statement).all())

    def get_tracker_for_update(self) -> AssignmentTracker:
        """Lock the singleton cursor row, creating it on first use."""

        statement = (
            select(AssignmentTracker)
            .where(AssignmentTracker.id == TRACKER_ROW_ID)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        tracker = self._session.scalar(statement)
        if tracker is None:
            tracker = AssignmentTracker(id=TRACKER_ROW_ID, last_assigned_index=-1)
            self._session.add(tracker)
            self._session.flush()
        return tracker

    def get_assignment(
        self,
        *,
        bank_id: UUID,
        transferencista_id: UUID,
    ) -> BankAssignment | None:
        statement = select(BankAssignment).where(
            BankAssignment.bank_id == bank_id,
            BankAssignment.transferencista_id == transferencista_id,
        )
        return self._session.scalar(statement)

    def add_assignment(self, assignment: BankAssignment) -> BankAssignment:
        self._session.add(assignment)
        self._session.flush()
        return assignment
