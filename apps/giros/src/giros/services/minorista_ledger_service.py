"""Minorista account use cases: funding, corrections, history, rebuild."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from giros.db.models.minorista import Minorista
from giros.db.models.minorista_transaction import MinoristaTransaction
from giros.db.unit_of_work import SessionProtocol, transactional
from giros.domain.errors import NotFoundError
from giros.domain.ledger_math import (
    MinoristaBalances,
    find_snapshot_breaks,
    project_minorista_balances,
)
from giros.repositories.ledger_repository import LedgerHistoryFilters
from giros.services.ledger_recorder import LedgerRecorder, balances_of
from giros.services.notifications import GiroNotifier, LoggingGiroNotifier, deliver

logger = logging.getLogger(__name__)


class MinoristaLedgerRepositoryProtocol(Protocol):
    """Ledger queries consumed by the minorista service."""

    def get_minorista(self, minorista_id: UUID) -> Minorista | None: ...

    def get_minorista_for_update(self, minorista_id: UUID) -> Minorista | None: ...

    def list_minoristas(self) -> list[Minorista]: ...

    def list_completed_history(
        self,
        filters: LedgerHistoryFilters,
    ) -> tuple[list[MinoristaTransaction], int]: ...

    def list_minorista_entries(
        self, minorista_id: UUID
    ) -> list[MinoristaTransaction]: ...


@dataclass(slots=True, frozen=True)
class RechargeInput:
    """Input model for funding a minorista account."""

    minorista_id: UUID
    amount: Decimal
    created_by: str
    description: str | None = None
    to_balance_in_favor: bool = False


@dataclass(slots=True, frozen=True)
class AdjustmentInput:
    """Input model for a signed manual correction."""

    minorista_id: UUID
    amount: Decimal
    description: str
    created_by: str


@dataclass(slots=True, frozen=True)
class BalanceDrift:
    """Difference between a live account row and its ledger."""

    minorista_id: UUID
    live: MinoristaBalances
    projected: MinoristaBalances
    snapshot_breaks: tuple[int, ...]
    repaired: bool = False

    @property
    def has_drift(self) -> bool:
        return self.live != self.projected


class MinoristaLedgerService:
    """Coordinates minorista ledger use cases."""

    def __init__(
        self,
        *,
        ledger_repository: MinoristaLedgerRepositoryProtocol,
        recorder: LedgerRecorder,
        session: SessionProtocol,
        notifier: GiroNotifier | None = None,
    ) -> None:
        self._ledger_repository = ledger_repository
        self._recorder = recorder
        self._session = session
        self._notifier = notifier or LoggingGiroNotifier()

    def recharge(self, payload: RechargeInput) -> MinoristaTransaction:
        with transactional(self._session):
            entry = self._recorder.post_recharge(
                minorista_id=payload.minorista_id,
                amount=payload.amount,
                created_by=payload.created_by,
                description=payload.description,
                to_balance_in_favor=payload.to_balance_in_favor,
            )
        deliver(self._notifier.minorista_balance_changed, entry)
        return entry

    def adjust(self, payload: AdjustmentInput) -> MinoristaTransaction:
        with transactional(self._session):
            entry = self._recorder.post_adjustment(
                minorista_id=payload.minorista_id,
                amount=payload.amount,
                description=payload.description,
                created_by=payload.created_by,
            )
        deliver(self._notifier.minorista_balance_changed, entry)
        return entry

    def get_account(self, minorista_id: UUID) -> Minorista:
        minorista = self._ledger_repository.get_minorista(minorista_id)
        if minorista is None:
            raise NotFoundError("Minorista", minorista_id)
        return minorista

    def list_history(
        self,
        minorista_id: UUID,
        *,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[MinoristaTransaction], int]:
        """List COMPLETED entries of one minorista, newest first."""

        self.get_account(minorista_id)
        return self._ledger_repository.list_completed_history(
            LedgerHistoryFilters(minorista_id=minorista_id, limit=limit, offset=offset)
        )

    def rebuild_balances(self, *, apply: bool = False) -> list[BalanceDrift]:
        """Compare every account with its ledger; optionally repair drift.

        Accounts without entries are skipped. Repair hands the latest
        non-cancelled snapshot to the recorder; entries are never edited.
        """

        reports: list[BalanceDrift] = []
        with transactional(self._session):
            for candidate in self._ledger_repository.list_minoristas():
                report = self._inspect(candidate.id, apply=apply)
                if report is not None:
                    reports.append(report)
        drifted = [report for report in reports if report.has_drift]
        logger.info(
            "balances_rebuilt",
            extra={
                "accounts_checked": len(reports),
                "accounts_drifted": len(drifted),
                "applied": apply,
            },
        )
        return reports

    def _inspect(self, minorista_id: UUID, *, apply: bool) -> BalanceDrift | None:
        minorista = self._ledger_repository.get_minorista_for_update(minorista_id)
        if minorista is None:
            return None
        entries = self._ledger_repository.list_minorista_entries(minorista_id)
        projection = project_minorista_balances(entries)
        if projection is None:
            return None

        live = balances_of(minorista)
        projected = MinoristaBalances(
            credit_limit=minorista.credit_limit,
            available_credit=projection.available_credit,
            credit_balance=projection.credit_balance,
            external_debt=projection.external_debt,
        )
        breaks = tuple(find_snapshot_breaks(entries))
        repaired = False
        if live != projected:
            logger.warning(
                "balance_drift_detected",
                extra={
                    "minorista_id": str(minorista_id),
                    "live_available_credit": str(live.available_credit),
                    "ledger_available_credit": str(projected.available_credit),
                    "live_credit_balance": str(live.credit_balance),
                    "ledger_credit_balance": str(projected.credit_balance),
                },
            )
            if apply:
                self._recorder.realign_minorista(
                    minorista_id=minorista_id, balances=projected
                )
                repaired = True
        return BalanceDrift(
            minorista_id=minorista_id,
            live=live,
            projected=projected,
            snapshot_breaks=breaks,
            repaired=repaired,
        )
