"""Giro lifecycle transition table."""

from __future__ import annotations

import enum

from giros.db.models.giro import GiroStatus
from giros.domain.errors import (
    InvalidStateTransitionError,
    PreconditionFailedError,
    compose_error_message,
)


class GiroAction(enum.StrEnum):
    """Operations that move a giro between states."""

    ASSIGN = "assign"
    START = "start"
    COMPLETE = "complete"
    CANCEL = "cancel"
    RETURN = "return"


TERMINAL_STATUSES = frozenset(
    {GiroStatus.COMPLETADO, GiroStatus.CANCELADO, GiroStatus.DEVUELTO}
)

TRANSITIONS: dict[GiroAction, tuple[frozenset[GiroStatus], GiroStatus]] = {
    GiroAction.ASSIGN: (frozenset({GiroStatus.PENDIENTE}), GiroStatus.ASIGNADO),
    GiroAction.START: (frozenset({GiroStatus.ASIGNADO}), GiroStatus.PROCESANDO),
    GiroAction.COMPLETE: (
        frozenset({GiroStatus.PROCESANDO}),
        GiroStatus.COMPLETADO,
    ),
    GiroAction.CANCEL: (
        frozenset(
            {GiroStatus.PENDIENTE, GiroStatus.ASIGNADO, GiroStatus.PROCESANDO}
        ),
        GiroStatus.CANCELADO,
    ),
    GiroAction.RETURN: (frozenset({GiroStatus.PROCESANDO}), GiroStatus.DEVUELTO),
}


def is_terminal(status: GiroStatus) -> bool:
    """Return whether no further transition is possible from status."""

    return status in TERMINAL_STATUSES


def ensure_transition(current: GiroStatus, action: GiroAction) -> GiroStatus:
    """Validate action against current state and return the target state."""

    allowed_sources, target = TRANSITIONS[action]
    if is_terminal(current):
        raise InvalidStateTransitionError(
            message=compose_error_message(
                cause=f"Giro is already {current.value} and cannot {action.value}.",
                action="Create a new giro instead of modifying a closed one.",
            ),
            details={"status": current.value, "action": action.value},
        )
    if current not in allowed_sources:
        expected = sorted(status.value for status in allowed_sources)
        raise PreconditionFailedError(
            message=compose_error_message(
                cause=(
                    f"Giro is {current.value}; {action.value} requires "
                    f"{', '.join(expected)}."
                ),
                action="Advance the giro to the required state first.",
            ),
            details={
                "status": current.value,
                "action": action.value,
                "expected": expected,
            },
        )
    return target
