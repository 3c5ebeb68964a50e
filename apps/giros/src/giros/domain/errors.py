"""Domain exceptions used across API, CLI and services."""

from __future__ import annotations

from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any


def compose_error_message(*, cause: str, action: str) -> str:
    """Build a user-facing error message with cause and corrective action."""

    return f"Cause: {cause} Action: {action}"


@dataclass(slots=True)
class DomainError(Exception):
    """Base exception for predictable domain failures."""

    code: str
    message: str
    status_code: int
    details: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.message


class ValidationFailedError(DomainError):
    """Raised when input is malformed, before any state change."""

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="VALIDATION_FAILED",
            message=message
            or compose_error_message(
                cause="Request data is malformed.",
                action="Adjust the input fields and try again.",
            ),
            status_code=HTTPStatus.BAD_REQUEST,
            details=details or {},
        )


class NotFoundError(DomainError):
    """Raised when a referenced giro, minorista, bank or account is absent."""

    def __init__(
        self,
        entity: str,
        identifier: object,
        message: str | None = None,
    ) -> None:
        super().__init__(
            code="NOT_FOUND",
            message=message
            or compose_error_message(
                cause=f"{entity} {identifier} was not found.",
                action="Check the identifier and retry.",
            ),
            status_code=HTTPStatus.NOT_FOUND,
            details={"entity": entity, "id": str(identifier)},
        )


class PreconditionFailedError(DomainError):
    """Raised when an operation lacks a required precondition."""

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
        code: str = "PRECONDITION_FAILED",
    ) -> None:
        super().__init__(
            code=code,
            message=message
            or compose_error_message(
                cause="A precondition for this operation is not satisfied.",
                action="Verify the giro state and related data, then retry.",
            ),
            status_code=HTTPStatus.UNPROCESSABLE_ENTITY,
            details=details or {},
        )


class NoEligibleAgentError(PreconditionFailedError):
    """Raised when a bank has no active and available transferencista."""

    def __init__(self, bank_id: object) -> None:
        super().__init__(
            message=compose_error_message(
                cause="No available transferencista is assigned to this bank.",
                action="Add or activate a bank assignment and retry.",
            ),
            details={"bank_id": str(bank_id)},
            code="NO_ELIGIBLE_AGENT",
        )


class InsufficientBalanceError(PreconditionFailedError):
    """Raised when a bank account entry would leave a negative balance."""

    def __init__(self, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            message=compose_error_message(
                cause="The bank account balance does not cover this movement.",
                action="Deposit funds or use another account.",
            ),
            details=details,
            code="INSUFFICIENT_BALANCE",
        )


class InvalidStateTransitionError(DomainError):
    """Raised when a lifecycle move is illegal, e.g. from a terminal state."""

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="INVALID_STATE_TRANSITION",
            message=message
            or compose_error_message(
                cause="The giro is already in a terminal state.",
                action="Create a new giro instead of modifying this one.",
            ),
            status_code=HTTPStatus.CONFLICT,
            details=details or {},
        )


class ConcurrencyConflictError(DomainError):
    """Raised when a concurrent writer changed a locked row first."""

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="CONCURRENCY_CONFLICT",
            message=message
            or compose_error_message(
                cause="Another operation updated the same account concurrently.",
                action="Retry the operation.",
            ),
            status_code=HTTPStatus.CONFLICT,
            details=details or {},
        )
