"""Post-commit notifications about giros and minorista balances."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol

from giros.db.models.giro import Giro
from giros.db.models.minorista_transaction import MinoristaTransaction

logger = logging.getLogger(__name__)


class GiroNotifier(Protocol):
    """Receiver of lifecycle events, invoked only after a commit."""

    def giro_assigned(self, giro: Giro) -> None: ...

    def giro_completed(self, giro: Giro) -> None: ...

    def giro_cancelled(self, giro: Giro) -> None: ...

    def giro_returned(self, giro: Giro) -> None: ...

    def minorista_balance_changed(self, entry: MinoristaTransaction) -> None: ...


class LoggingGiroNotifier:
    """Default notifier that only writes structured log lines."""

    def giro_assigned(self, giro: Giro) -> None:
        logger.info(
            "notify_giro_assigned",
            extra={
                "giro_id": str(giro.id),
                "transferencista_id": str(giro.transferencista_id),
            },
        )

    def giro_completed(self, giro: Giro) -> None:
        logger.info("notify_giro_completed", extra={"giro_id": str(giro.id)})

    def giro_cancelled(self, giro: Giro) -> None:
        logger.info("notify_giro_cancelled", extra={"giro_id": str(giro.id)})

    def giro_returned(self, giro: Giro) -> None:
        logger.info(
            "notify_giro_returned",
            extra={"giro_id": str(giro.id), "reason": giro.return_reason},
        )

    def minorista_balance_changed(self, entry: MinoristaTransaction) -> None:
        logger.info(
            "notify_minorista_balance_changed",
            extra={
                "minorista_id": str(entry.minorista_id),
                "available_credit": str(entry.available_credit),
                "balance_in_favor": str(entry.current_balance_in_favor),
            },
        )


def deliver(callback: Callable[..., None], *args: object) -> None:
    """Run one notifier callback; delivery failures never reach the caller."""

    try:
        callback(*args)
    except Exception:
        logger.exception(
            "notification_failed",
            extra={"callback": getattr(callback, "__name__", repr(callback))},
        )
