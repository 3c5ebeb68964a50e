"""Round-robin dispatch of giros to transferencistas."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from giros.db.models.bank import Bank
from giros.db.models.bank_assignment import AssignmentTracker, BankAssignment
from giros.db.models.transferencista import Transferencista
from giros.db.unit_of_work import SessionProtocol, transactional
from giros.domain.errors import (
    NoEligibleAgentError,
    NotFoundError,
    PreconditionFailedError,
    ValidationFailedError,
    compose_error_message,
)
from giros.domain.rotation import next_rotation_index

logger = logging.getLogger(__name__)


class AssignmentRepositoryProtocol(Protocol):
    """Assignment repository contract consumed by the dispatcher."""

    def list_eligible(self, bank_id: UUID) -> list[BankAssignment]: ...

    def get_tracker_for_update(self) -> AssignmentTracker: ...

    def get_assignment(
        self,
        *,
        bank_id: UUID,
        transferencista_id: UUID,
    ) -> BankAssignment | None: ...

    def add_assignment(self, assignment: BankAssignment) -> BankAssignment: ...


class BankLookupProtocol(Protocol):
    """Bank lookups needed to validate new assignments."""

    def get_bank(self, bank_id: UUID) -> Bank | None: ...

    def get_transferencista(
        self, transferencista_id: UUID
    ) -> Transferencista | None: ...


@dataclass(slots=True, frozen=True)
class AddAssignmentInput:
    """Input model for adding a transferencista to a bank pool."""

    bank_id: UUID
    transferencista_id: UUID
    priority: int = 0
    is_active: bool = True


def _utcnow() -> datetime:
    return datetime.now(UTC)


class AssignmentDispatcher:
    """Selects the executing transferencista for a destination bank.

    The cursor lives only in the tracker row; every selection locks it,
    reads it and writes it back inside the caller's transaction.
    """

    def __init__(
        self,
        *,
        assignment_repository: AssignmentRepositoryProtocol,
        bank_repository: BankLookupProtocol,
        session: SessionProtocol,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._assignment_repository = assignment_repository
        self._bank_repository = bank_repository
        self._session = session
        self._clock = clock

    def select_transferencista(self, bank_id: UUID) -> BankAssignment:
        """Pick the next pool member for bank_id and advance the cursor."""

        pool = self._assignment_repository.list_eligible(bank_id)
        if not pool:
            logger.warning("no_eligible_agent", extra={"bank_id": str(bank_id)})
            raise NoEligibleAgentError(bank_id)

        tracker = self._assignment_repository.get_tracker_for_update()
        index = next_rotation_index(tracker.last_assigned_index, len(pool))
        tracker.last_assigned_index = index
        tracker.updated_at = self._clock()

        selected = pool[index]
        logger.info(
            "transferencista_selected",
            extra={
                "bank_id": str(bank_id),
                "transferencista_id": str(selected.transferencista_id),
                "index": index,
                "pool_size": len(pool),
            },
        )
        return selected

    def add_assignment(self, payload: AddAssignmentInput) -> BankAssignment:
        """Add a transferencista to a bank's dispatch pool."""

        with transactional(self._session):
            if self._bank_repository.get_bank(payload.bank_id) is None:
                raise NotFoundError("Bank", payload.bank_id)
            if (
                self._bank_repository.get_transferencista(payload.transferencista_id)
                is None
            ):
                raise NotFoundError("Transferencista", payload.transferencista_id)
            existing = self._assignment_repository.get_assignment(
                bank_id=payload.bank_id,
                transferencista_id=payload.transferencista_id,
            )
            if existing is not None:
                raise PreconditionFailedError(
                    message=compose_error_message(
                        cause="The transferencista is already assigned to this bank.",
                        action="Update the existing assignment instead.",
                    ),
                    details={"assignment_id": existing.id},
                )
            assignment = self._assignment_repository.add_assignment(
                BankAssignment(
                    bank_id=payload.bank_id,
                    transferencista_id=payload.transferencista_id,
                    priority=payload.priority,
                    is_active=payload.is_active,
                )
            )
        logger.info(
            "bank_assignment_added",
            extra={
                "bank_id": str(payload.bank_id),
                "transferencista_id": str(payload.transferencista_id),
                "priority": payload.priority,
            },
        )
        return assignment

    def set_assignment_active(
        self,
        *,
        bank_id: UUID,
        transferencista_id: UUID,
        is_active: bool,
    ) -> BankAssignment:
        """Enable or disable one pool membership without deleting it."""

        with transactional(self._session):
            assignment = self._assignment_repository.get_assignment(
                bank_id=bank_id,
                transferencista_id=transferencista_id,
            )
            if assignment is None:
                raise NotFoundError(
                    "BankAssignment", f"{bank_id}/{transferencista_id}"
                )
            assignment.is_active = is_active
        return assignment

    def update_assignment_priority(
        self,
        *,
        bank_id: UUID,
        transferencista_id: UUID,
        priority: int,
    ) -> BankAssignment:
        """Move a pool member; lower priority values rotate first."""

        if priority < 0:
            raise ValidationFailedError(
                message=compose_error_message(
                    cause="Priority cannot be negative.",
                    action="Send zero or a positive integer.",
                ),
                details={"field": "priority"},
            )
        with transactional(self._session):
            assignment = self._assignment_repository.get_assignment(
                bank_id=bank_id,
                transferencista_id=transferencista_id,
            )
            if assignment is None:
                raise NotFoundError(
                    "BankAssignment", f"{bank_id}/{transferencista_id}"
                )
            assignment.priority = priority
        logger.info(
            "bank_assignment_priority_updated",
            extra={
                "bank_id": str(bank_id),
                "transferencista_id": str(transferencista_id),
                "priority": priority,
            },
        )
        return assignment
