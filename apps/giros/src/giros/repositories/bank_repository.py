"""Bank, transferencista, bank account and cash-flow note persistence."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from giros.db.models.bank import Bank
from giros.db.models.bank_account import BankAccount
from giros.db.models.bank_transaction import BankTransaction
from giros.db.models.transferencista import Transferencista


@dataclass(slots=True, frozen=True)
class BankTransactionFilters:
    """Filters for listing cash-flow notes of one bank."""

    bank_id: UUID
    limit: int = 50
    offset: int = 0


class BankRepository:
    """Repository for banks, agents, their accounts and cash-flow notes."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_bank(self, bank_id: UUID) -> Bank | None:
        return self._session.get(Bank, bank_id)

    def get_bank_by_code(self, code: int) -> Bank | None:
        return self._session.scalar(select(Bank).where(Bank.code == code))

    def add_bank(self, bank: Bank) -> Bank:
        self._session.add(bank)
        self._session.flush()
        return bank

    def get_transferencista(self, transferencista_id: UUID) -> Transferencista | None:
        return self._session.get(Transferencista, transferencista_id)

    def add_transferencista(self, transferencista: Transferencista) -> Transferencista:
        self._session.add(transferencista)
        self._session.flush()
        return transferencista

    def get_bank_account_by_number(self, account_number: str) -> BankAccount | None:
        statement = select(BankAccount).where(
            BankAccount.account_number == account_number
        )
        return self._session.scalar(statement)

    def add_bank_account(self, account: BankAccount) -> BankAccount:
        self._session.add(account)
        self._session.flush()
        return account

    def add_bank_transaction(self, note: BankTransaction) -> BankTransaction:
        self._session.add(note)
        self._session.flush()
        return note

    def list_bank_transactions(
        self,
        filters: BankTransactionFilters,
    ) -> tuple[list[BankTransaction], int]:
        condition = BankTransaction.bank_id == filters.bank_id
        total = self._session.scalar(
            select(func.count()).select_from(BankTransaction).where(condition)
        )
        statement = (
            select(BankTransaction)
            .where(condition)
            .order_by(BankTransaction.created_at.desc(), BankTransaction.id)
            .limit(filters.limit)
            .offset(filters.offset)
        )
        return list(self._session.scalars(statement).all()), int(total or 0)
