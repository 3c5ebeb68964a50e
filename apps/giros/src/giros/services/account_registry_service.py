"""Provisioning of banks, transferencistas, bank accounts and minoristas.

Accounts are opened here with their starting state only. Every later
balance change goes through the ledger recorder: bank accounts open at
zero and are funded with a DEPOSIT, and a minorista opens with its whole
credit line available and no entries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from giros.db.models.bank import Bank, Currency
from giros.db.models.bank_account import AccountOwnerType, AccountType, BankAccount
from giros.db.models.minorista import Minorista
from giros.db.models.transferencista import Transferencista
from giros.db.unit_of_work import SessionProtocol, transactional
from giros.domain.errors import (
    NotFoundError,
    PreconditionFailedError,
    ValidationFailedError,
    compose_error_message,
)
from giros.domain.money import ZERO, quantize_money, quantize_rate

logger = logging.getLogger(__name__)

DEFAULT_PROFIT_PERCENTAGE = Decimal("0.0500")


class RegistryBankRepositoryProtocol(Protocol):
    """Bank repository contract consumed by the registry."""

    def get_bank(self, bank_id: UUID) -> Bank | None: ...

    def get_bank_by_code(self, code: int) -> Bank | None: ...

    def add_bank(self, bank: Bank) -> Bank: ...

    def get_transferencista(
        self, transferencista_id: UUID
    ) -> Transferencista | None: ...

    def add_transferencista(
        self, transferencista: Transferencista
    ) -> Transferencista: ...

    def get_bank_account_by_number(
        self, account_number: str
    ) -> BankAccount | None: ...

    def add_bank_account(self, account: BankAccount) -> BankAccount: ...


class RegistryMinoristaRepositoryProtocol(Protocol):
    """Minorista repository contract consumed by the registry."""

    def get_minorista_for_update(self, minorista_id: UUID) -> Minorista | None: ...

    def add_minorista(self, minorista: Minorista) -> Minorista: ...


@dataclass(slots=True, frozen=True)
class CreateBankInput:
    """Input model for registering a bank."""

    name: str
    code: int
    currency: Currency = Currency.VES


@dataclass(slots=True, frozen=True)
class CreateTransferencistaInput:
    """Input model for registering a field agent."""

    full_name: str
    available: bool = True


@dataclass(slots=True, frozen=True)
class CreateBankAccountInput:
    """Input model for opening a platform or agent bank account."""

    bank_id: UUID
    owner_type: AccountOwnerType
    account_holder: str
    account_type: AccountType = AccountType.AHORROS
    transferencista_id: UUID | None = None
    account_number: str | None = None


@dataclass(slots=True, frozen=True)
class CreateMinoristaInput:
    """Input model for opening a minorista credit account."""

    full_name: str
    credit_limit: Decimal
    profit_percentage: Decimal = DEFAULT_PROFIT_PERCENTAGE


def _required_text(value: str, *, field: str) -> str:
    trimmed = value.strip()
    if not trimmed:
        raise ValidationFailedError(
            message=compose_error_message(
                cause=f"{field} cannot be blank.",
                action=f"Provide {field} and retry.",
            ),
            details={"field": field},
        )
    return trimmed


def _validated_percentage(value: Decimal) -> Decimal:
    percentage = quantize_rate(value)
    if percentage < ZERO or percentage > Decimal("1"):
        raise ValidationFailedError(
            message=compose_error_message(
                cause="profit_percentage must be between 0 and 1.",
                action="Send a fraction such as 0.05 for five percent.",
            ),
            details={"field": "profit_percentage"},
        )
    return percentage


class AccountRegistryService:
    """Coordinates provisioning use cases."""

    def __init__(
        self,
        *,
        bank_repository: RegistryBankRepositoryProtocol,
        minorista_repository: RegistryMinoristaRepositoryProtocol,
        session: SessionProtocol,
    ) -> None:
        self._bank_repository = bank_repository
        self._minorista_repository = minorista_repository
        self._session = session

    def create_bank(self, payload: CreateBankInput) -> Bank:
        name = _required_text(payload.name, field="name")
        if payload.code <= 0:
            raise ValidationFailedError(
                message=compose_error_message(
                    cause="Bank code must be a positive number.",
                    action="Send the numeric code of the bank.",
                ),
                details={"field": "code"},
            )

        with transactional(self._session):
            if self._bank_repository.get_bank_by_code(payload.code) is not None:
                raise PreconditionFailedError(
                    message=compose_error_message(
                        cause=f"Bank code {payload.code} is already registered.",
                        action="Use the existing bank or a different code.",
                    ),
                    details={"code": payload.code},
                )
            bank = self._bank_repository.add_bank(
                Bank(name=name, code=payload.code, currency=payload.currency)
            )
        logger.info(
            "bank_created",
            extra={"bank_id": str(bank.id), "code": bank.code},
        )
        return bank

    def create_transferencista(
        self, payload: CreateTransferencistaInput
    ) -> Transferencista:
        full_name = _required_text(payload.full_name, field="full_name")
        with transactional(self._session):
            transferencista = self._bank_repository.add_transferencista(
                Transferencista(full_name=full_name, available=payload.available)
            )
        logger.info(
            "transferencista_created",
            extra={"transferencista_id": str(transferencista.id)},
        )
        return transferencista

    def set_transferencista_available(
        self,
        transferencista_id: UUID,
        *,
        available: bool,
    ) -> Transferencista:
        """Take an agent out of, or back into, every dispatch pool."""

        with transactional(self._session):
            transferencista = self._bank_repository.get_transferencista(
                transferencista_id
            )
            if transferencista is None:
                raise NotFoundError("Transferencista", transferencista_id)
            transferencista.available = available
        logger.info(
            "transferencista_availability_changed",
            extra={
                "transferencista_id": str(transferencista_id),
                "available": available,
            },
        )
        return transferencista

    def create_bank_account(self, payload: CreateBankAccountInput) -> BankAccount:
        """Open an account with a zero balance."""

        account_holder = _required_text(
            payload.account_holder, field="account_holder"
        )
        account_number = (
            _required_text(payload.account_number, field="account_number")
            if payload.account_number is not None
            else None
        )
        owned_by_agent = payload.owner_type == AccountOwnerType.TRANSFERENCISTA
        if owned_by_agent != (payload.transferencista_id is not None):
            raise ValidationFailedError(
                message=compose_error_message(
                    cause=(
                        "transferencista_id is required for TRANSFERENCISTA "
                        "accounts and not allowed for PLATFORM accounts."
                    ),
                    action="Match transferencista_id to the owner type.",
                ),
                details={"field": "transferencista_id"},
            )

        with transactional(self._session):
            if self._bank_repository.get_bank(payload.bank_id) is None:
                raise NotFoundError("Bank", payload.bank_id)
            if (
                payload.transferencista_id is not None
                and self._bank_repository.get_transferencista(
                    payload.transferencista_id
                )
                is None
            ):
                raise NotFoundError("Transferencista", payload.transferencista_id)
            if (
                account_number is not None
                and self._bank_repository.get_bank_account_by_number(account_number)
                is not None
            ):
                raise PreconditionFailedError(
                    message=compose_error_message(
                        cause="The account number is already registered.",
                        action="Check the number or reuse the existing account.",
                    ),
                    details={"account_number": account_number},
                )
            account = self._bank_repository.add_bank_account(
                BankAccount(
                    bank_id=payload.bank_id,
                    owner_type=payload.owner_type,
                    transferencista_id=payload.transferencista_id,
                    account_number=account_number,
                    account_holder=account_holder,
                    account_type=payload.account_type,
                    balance=ZERO,
                )
            )
        logger.info(
            "bank_account_opened",
            extra={
                "bank_account_id": str(account.id),
                "bank_id": str(payload.bank_id),
                "owner_type": payload.owner_type.value,
            },
        )
        return account

    def create_minorista(self, payload: CreateMinoristaInput) -> Minorista:
        """Open a credit account with the whole line available."""

        full_name = _required_text(payload.full_name, field="full_name")
        credit_limit = quantize_money(payload.credit_limit)
        if credit_limit < ZERO:
            raise ValidationFailedError(
                message=compose_error_message(
                    cause="credit_limit cannot be negative.",
                    action="Send zero or a positive amount.",
                ),
                details={"field": "credit_limit"},
            )
        percentage = _validated_percentage(payload.profit_percentage)

        with transactional(self._session):
            minorista = self._minorista_repository.add_minorista(
                Minorista(
                    full_name=full_name,
                    credit_limit=credit_limit,
                    available_credit=credit_limit,
                    credit_balance=ZERO,
                    external_debt=ZERO,
                    profit_percentage=percentage,
                )
            )
        logger.info(
            "minorista_created",
            extra={
                "minorista_id": str(minorista.id),
                "credit_limit": str(credit_limit),
                "profit_percentage": str(percentage),
            },
        )
        return minorista

    def update_profit_percentage(
        self,
        minorista_id: UUID,
        profit_percentage: Decimal,
    ) -> Minorista:
        """Change the share used by discounts posted from now on."""

        percentage = _validated_percentage(profit_percentage)
        with transactional(self._session):
            minorista = self._minorista_repository.get_minorista_for_update(
                minorista_id
            )
            if minorista is None:
                raise NotFoundError("Minorista", minorista_id)
            previous = minorista.profit_percentage
            minorista.profit_percentage = percentage
        logger.info(
            "minorista_profit_percentage_updated",
            extra={
                "minorista_id": str(minorista_id),
                "previous": str(previous),
                "profit_percentage": str(percentage),
            },
        )
        return minorista
