"""Seed data and service wiring shared by integration and contract tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from giros.db.models.bank import Bank, Currency
from giros.db.models.bank_account import AccountOwnerType, AccountType, BankAccount
from giros.db.models.bank_assignment import BankAssignment
from giros.db.models.exchange_rate import ExchangeRate
from giros.db.models.giro import Giro
from giros.db.models.minorista import Minorista
from giros.db.models.minorista_transaction import MinoristaTransaction
from giros.db.models.transferencista import Transferencista
from giros.repositories.assignment_repository import AssignmentRepository
from giros.repositories.bank_repository import BankRepository
from giros.repositories.exchange_rate_repository import ExchangeRateRepository
from giros.repositories.giro_repository import GiroRepository
from giros.repositories.ledger_repository import LedgerRepository
from giros.services.assignment_dispatcher import AssignmentDispatcher
from giros.services.bank_ledger_service import BankLedgerService
from giros.services.giro_service import GiroService
from giros.services.ledger_recorder import LedgerRecorder
from giros.services.minorista_ledger_service import MinoristaLedgerService
from giros.services.rate_book_service import RateBookService


@dataclass(slots=True)
class SeededWorld:
    bank_id: UUID
    bank_code: int
    transferencista_ids: list[UUID]
    account_ids: dict[UUID, UUID]
    platform_account_id: UUID
    minorista_id: UUID
    rate_id: UUID


def seed_world(
    session: Session,
    *,
    agent_names: tuple[str, ...] = ("Ana", "Beto", "Carla"),
    credit_limit: Decimal = Decimal("1000.00"),
    account_balance: Decimal = Decimal("100000.00"),
) -> SeededWorld:
    rate = ExchangeRate(
        sequence=1,
        buy_rate=Decimal("38.0000"),
        sell_rate=Decimal("40.0000"),
        usd=Decimal("36.5000"),
        bcv=Decimal("36.5000"),
        is_custom=False,
        created_by="admin",
    )
    bank = Bank(name="Banesco", currency=Currency.VES, code=134)
    session.add_all([rate, bank])
    session.flush()

    transferencista_ids: list[UUID] = []
    account_ids: dict[UUID, UUID] = {}
    for priority, name in enumerate(agent_names):
        agent = Transferencista(full_name=name, available=True)
        session.add(agent)
        session.flush()
        account = BankAccount(
            bank_id=bank.id,
            owner_type=AccountOwnerType.TRANSFERENCISTA,
            transferencista_id=agent.id,
            account_number=f"0134000000000000000{priority}",
            account_holder=name,
            account_type=AccountType.CORRIENTE,
            balance=account_balance,
        )
        session.add(account)
        session.add(
            BankAssignment(
                bank_id=bank.id,
                transferencista_id=agent.id,
                priority=priority,
                is_active=True,
            )
        )
        session.flush()
        transferencista_ids.append(agent.id)
        account_ids[agent.id] = account.id

    platform_account = BankAccount(
        bank_id=bank.id,
        owner_type=AccountOwnerType.PLATFORM,
        account_number=None,
        account_holder="Plataforma",
        account_type=AccountType.AHORROS,
        balance=Decimal("0.00"),
    )
    minorista = Minorista(
        full_name="Bodega La Esquina",
        credit_limit=credit_limit,
        available_credit=credit_limit,
        credit_balance=Decimal("0.00"),
        external_debt=Decimal("0.00"),
        profit_percentage=Decimal("0.0500"),
    )
    session.add_all([platform_account, minorista])
    session.commit()
    return SeededWorld(
        bank_id=bank.id,
        bank_code=bank.code,
        transferencista_ids=transferencista_ids,
        account_ids=account_ids,
        platform_account_id=platform_account.id,
        minorista_id=minorista.id,
        rate_id=rate.id,
    )


@dataclass
class RecordingNotifier:
    events: list[tuple[str, UUID]] = field(default_factory=list)

    def giro_assigned(self, giro: Giro) -> None:
        self.events.append(("assigned", giro.id))

    def giro_completed(self, giro: Giro) -> None:
        self.events.append(("completed", giro.id))

    def giro_cancelled(self, giro: Giro) -> None:
        self.events.append(("cancelled", giro.id))

    def giro_returned(self, giro: Giro) -> None:
        self.events.append(("returned", giro.id))

    def minorista_balance_changed(self, entry: MinoristaTransaction) -> None:
        self.events.append(("balance_changed", entry.minorista_id))


@dataclass(slots=True)
class GiroStack:
    giros: GiroService
    minoristas: MinoristaLedgerService
    banks: BankLedgerService
    rate_book: RateBookService
    dispatcher: AssignmentDispatcher
    ledger_repository: LedgerRepository


def build_stack(
    session: Session,
    *,
    reserve_credit_on_create: bool = False,
    notifier: RecordingNotifier | None = None,
) -> GiroStack:
    ledger_repository = LedgerRepository(session)
    bank_repository = BankRepository(session)
    recorder = LedgerRecorder(ledger_repository=ledger_repository)
    rate_book = RateBookService(
        exchange_rate_repository=ExchangeRateRepository(session),
        session=session,
    )
    dispatcher = AssignmentDispatcher(
        assignment_repository=AssignmentRepository(session),
        bank_repository=bank_repository,
        session=session,
    )
    return GiroStack(
        giros=GiroService(
            giro_repository=GiroRepository(session),
            ledger_repository=ledger_repository,
            bank_repository=bank_repository,
            rate_book=rate_book,
            dispatcher=dispatcher,
            recorder=recorder,
            session=session,
            notifier=notifier,
            reserve_credit_on_create=reserve_credit_on_create,
        ),
        minoristas=MinoristaLedgerService(
            ledger_repository=ledger_repository,
            recorder=recorder,
            session=session,
            notifier=notifier,
        ),
        banks=BankLedgerService(
            bank_repository=bank_repository,
            ledger_repository=ledger_repository,
            recorder=recorder,
            session=session,
        ),
        rate_book=rate_book,
        dispatcher=dispatcher,
        ledger_repository=ledger_repository,
    )
