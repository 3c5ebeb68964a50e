"""API dependency providers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from giros.core.settings import get_settings
from giros.db.session import get_db_session
from giros.repositories.assignment_repository import AssignmentRepository
from giros.repositories.bank_repository import BankRepository
from giros.repositories.exchange_rate_repository import ExchangeRateRepository
from giros.repositories.giro_repository import GiroRepository
from giros.repositories.ledger_repository import LedgerRepository
from giros.services.account_registry_service import AccountRegistryService
from giros.services.assignment_dispatcher import AssignmentDispatcher
from giros.services.bank_ledger_service import BankLedgerService
from giros.services.giro_service import GiroService
from giros.services.ledger_recorder import LedgerRecorder
from giros.services.minorista_ledger_service import MinoristaLedgerService
from giros.services.rate_book_service import RateBookService


def get_rate_book_service(
    session: Annotated[Session, Depends(get_db_session)],
) -> RateBookService:
    """Build rate book service with per-request session."""

    return RateBookService(
        exchange_rate_repository=ExchangeRateRepository(session),
        session=session,
    )


def get_assignment_dispatcher(
    session: Annotated[Session, Depends(get_db_session)],
) -> AssignmentDispatcher:
    """Build assignment dispatcher with per-request session."""

    return AssignmentDispatcher(
        assignment_repository=AssignmentRepository(session),
        bank_repository=BankRepository(session),
        session=session,
    )


def get_giro_service(
    session: Annotated[Session, Depends(get_db_session)],
) -> GiroService:
    """Build giro service wiring rate book, dispatcher and recorder."""

    ledger_repository = LedgerRepository(session)
    bank_repository = BankRepository(session)
    return GiroService(
        giro_repository=GiroRepository(session),
        ledger_repository=ledger_repository,
        bank_repository=bank_repository,
        rate_book=RateBookService(
            exchange_rate_repository=ExchangeRateRepository(session),
            session=session,
        ),
        dispatcher=AssignmentDispatcher(
            assignment_repository=AssignmentRepository(session),
            bank_repository=bank_repository,
            session=session,
        ),
        recorder=LedgerRecorder(ledger_repository=ledger_repository),
        session=session,
        reserve_credit_on_create=get_settings().reserve_credit_on_create,
    )


def get_minorista_ledger_service(
    session: Annotated[Session, Depends(get_db_session)],
) -> MinoristaLedgerService:
    """Build minorista ledger service with per-request session."""

    ledger_repository = LedgerRepository(session)
    return MinoristaLedgerService(
        ledger_repository=ledger_repository,
        recorder=LedgerRecorder(ledger_repository=ledger_repository),
        session=session,
    )


def get_bank_ledger_service(
    session: Annotated[Session, Depends(get_db_session)],
) -> BankLedgerService:
    """Build bank ledger service with per-request session."""

    ledger_repository = LedgerRepository(session)
    return BankLedgerService(
        bank_repository=BankRepository(session),
        ledger_repository=ledger_repository,
        recorder=LedgerRecorder(ledger_repository=ledger_repository),
        session=session,
    )


def get_account_registry_service(
    session: Annotated[Session, Depends(get_db_session)],
) -> AccountRegistryService:
    """Build provisioning service with per-request session."""

    return AccountRegistryService(
        bank_repository=BankRepository(session),
        minorista_repository=LedgerRepository(session),
        session=session,
    )
