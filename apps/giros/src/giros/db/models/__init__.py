"""ORM models for the giros domain."""

from giros.db.models.bank import Bank, Currency
from giros.db.models.bank_account import AccountOwnerType, AccountType, BankAccount
from giros.db.models.bank_account_transaction import (
    BankAccountTransaction,
    BankAccountTransactionType,
)
from giros.db.models.bank_assignment import AssignmentTracker, BankAssignment
from giros.db.models.bank_transaction import BankTransaction, BankTransactionType
from giros.db.models.exchange_rate import ExchangeRate
from giros.db.models.giro import ExecutionType, Giro, GiroStatus
from giros.db.models.minorista import Minorista
from giros.db.models.minorista_transaction import (
    MinoristaTransaction,
    MinoristaTransactionStatus,
    MinoristaTransactionType,
)
from giros.db.models.transferencista import Transferencista

__all__ = [
    "AccountOwnerType",
    "AccountType",
    "AssignmentTracker",
    "Bank",
    "BankAccount",
    "BankAccountTransaction",
    "BankAccountTransactionType",
    "BankAssignment",
    "BankTransaction",
    "BankTransactionType",
    "Currency",
    "ExchangeRate",
    "ExecutionType",
    "Giro",
    "GiroStatus",
    "Minorista",
    "MinoristaTransaction",
    "MinoristaTransactionStatus",
    "MinoristaTransactionType",
    "Transferencista",
]
