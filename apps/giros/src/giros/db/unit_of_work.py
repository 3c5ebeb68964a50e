"""Transaction boundary shared by every balance-mutating operation."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Protocol

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm.exc import StaleDataError

from giros.domain.errors import ConcurrencyConflictError

# PostgreSQL serialization_failure, deadlock_detected, lock_not_available.
RETRYABLE_SQLSTATES = frozenset({"40001", "40P01", "55P03"})

# Unique keys two writers can race for: per-account ledger sequences, the
# rate publication sequence and the lazily created rotation tracker row.
CONTENDED_CONSTRAINTS = (
    "uq_minorista_transactions_minorista_sequence",
    "uq_bank_account_transactions_account_sequence",
    "minorista_transactions.sequence",
    "bank_account_transactions.sequence",
    "uq_exchange_rates_sequence",
    "exchange_rates.sequence",
    "assignment_tracker_pkey",
    "assignment_tracker.id",
)


class SessionProtocol(Protocol):
    """Subset of SQLAlchemy session APIs used by transactional services."""

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


def is_concurrency_failure(exc: Exception) -> bool:
    """Return whether a persistence error means a concurrent writer won."""

    if isinstance(exc, StaleDataError):
        return True
    if isinstance(exc, OperationalError):
        return getattr(exc.orig, "sqlstate", None) in RETRYABLE_SQLSTATES
    if isinstance(exc, IntegrityError):
        error_text = str(exc.orig)
        return any(name in error_text for name in CONTENDED_CONSTRAINTS)
    return False


@contextmanager
def transactional(session: SessionProtocol) -> Iterator[None]:
    """Commit the enclosed unit of work or roll it back entirely."""

    try:
        yield
        session.commit()
    except Exception as exc:
        session.rollback()
        if is_concurrency_failure(exc):
            raise ConcurrencyConflictError(
                details={"error_type": type(exc).__name__}
            ) from exc
        raise
