"""Ledger account and ledger entry persistence operations."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from giros.db.models.bank_account import BankAccount
from giros.db.models.bank_account_transaction import BankAccountTransaction
from giros.db.models.minorista import Minorista
from giros.db.models.minorista_transaction import (
    MinoristaTransaction,
    MinoristaTransactionStatus,
    MinoristaTransactionType,
)


@dataclass(slots=True, frozen=True)
class LedgerHistoryFilters:
    """Filters for paginated minorista ledger history."""

    minorista_id: UUID
    limit: int = 50
    offset: int = 0


class LedgerRepository:
    """Repository for minorista and bank account ledgers.

    Account rows are always re-read with ``FOR UPDATE`` and
    ``populate_existing`` so the snapshot written next is based on the
    committed balance, not on a copy loaded earlier in the request.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_minorista(self, minorista_id: UUID) -> Minorista | None:
        return self._session.get(Minorista, minorista_id)

    def add_minorista(self, minorista: Minorista) -> Minorista:
        self._session.add(minorista)
        self._session.flush()
        return minorista

    def list_minoristas(self) -> list[Minorista]:
        statement = select(Minorista).order_by(Minorista.created_at, Minorista.id)
        return list(self._session.scalars(statement).all())

    def get_minorista_for_update(self, minorista_id: UUID) -> Minorista | None:
        statement = (
            select(Minorista)
            .where(Minorista.id == minorista_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self._session.scalar(statement)

    def get_bank_account(self, bank_account_id: UUID) -> BankAccount | None:
        return self._session.get(BankAccount, bank_account_id)

    def get_bank_account_for_update(self, bank_account_id: UUID) -> BankAccount | None:
        statement = (
            select(BankAccount)
            .where(BankAccount.id == bank_account_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self._session.scalar(statement)

    def next_minorista_sequence(self, minorista_id: UUID) -> int:
        statement = select(
            func.coalesce(func.max(MinoristaTransaction.sequence), 0)
        ).where(MinoristaTransaction.minorista_id == minorista_id)
        return int(self._session.scalar(statement) or 0) + 1

    def next_bank_account_sequence(self, bank_account_id: UUID) -> int:
        statement = select(
            func.coalesce(func.max(BankAccountTransaction.sequence), 0)
        ).where(BankAccountTransaction.bank_account_id == bank_account_id)
        return int(self._session.scalar(statement) or 0) + 1

    def add_minorista_transaction(
        self, entry: MinoristaTransaction
    ) -> MinoristaTransaction:
        self._session.add(entry)
        self._session.flush()
        return entry

    def add_bank_account_transaction(
        self, entry: BankAccountTransaction
    ) -> BankAccountTransaction:
        self._session.add(entry)
        self._session.flush()
        return entry

    def get_hold_for_giro(self, giro_id: UUID) -> MinoristaTransaction | None:
        """Return the PENDING DISCOUNT reserved for a giro, locked."""

        statement = (
            select(MinoristaTransaction)
            .where(
                MinoristaTransaction.giro_id == giro_id,
                MinoristaTransaction.type == MinoristaTransactionType.DISCOUNT,
                MinoristaTransaction.status == MinoristaTransactionStatus.PENDING,
            )
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self._session.scalar(statement)

    def list_completed_history(
        self,
        filters: LedgerHistoryFilters,
    ) -> tuple[list[MinoristaTransaction], int]:
        """Return COMPLETED entries of one minorista, newest first."""

        conditions = (
            MinoristaTransaction.minorista_id == filters.minorista_id,
            MinoristaTransaction.status == MinoristaTransactionStatus.COMPLETED,
        )
        total = self._session.scalar(
            select(func.count()).select_from(MinoristaTransaction).where(*conditions)
        )
        statement = (
            select(MinoristaTransaction)
            .where(*conditions)
            .order_by(MinoristaTransaction.sequence.desc())
            .limit(filters.limit)
            .offset(filters.offset)
        )
        return list(self._session.scalars(statement).all()), int(total or 0)

    def list_minorista_entries(self, minorista_id: UUID) -> list[MinoristaTransaction]:
        """Return every entry of one minorista in posting order."""

        statement = (
            select(MinoristaTransaction)
            .where(MinoristaTransaction.minorista_id == minorista_id)
            .order_by(MinoristaTransaction.sequence.asc())
        )
        return list(self._session.scalars(statement).all())

    def list_bank_account_entries(
        self, bank_account_id: UUID
    ) -> list[BankAccountTransaction]:
        statement = (
            select(BankAccountTransaction)
            .where(BankAccountTransaction.bank_account_id == bank_account_id)
            .order_by(BankAccountTransaction.sequence.asc())
        )
        return list(self._session.scalars(statement).all())
