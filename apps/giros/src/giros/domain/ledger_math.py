"""Pure balance arithmetic behind every ledger entry.

Nothing here touches the database: each ``apply_*`` function takes the
account balances read under lock and returns the posting to persist, with
the before and after snapshots the entry must carry.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Protocol, assert_never

from giros.db.models.bank_account_transaction import BankAccountTransactionType
from giros.db.models.minorista_transaction import MinoristaTransactionStatus
from giros.domain.errors import InsufficientBalanceError
from giros.domain.money import ZERO, quantize_money


@dataclass(slots=True, frozen=True)
class MinoristaBalances:
    """Live state of a minorista credit account."""

    credit_limit: Decimal
    available_credit: Decimal
    credit_balance: Decimal
    external_debt: Decimal = ZERO

    @property
    def accumulated_debt(self) -> Decimal:
        """Credit drawn from the line plus unsecured over-limit debt."""

        return (self.credit_limit - self.available_credit) + self.external_debt

    @property
    def remaining_balance(self) -> Decimal:
        """Spendable funds before new external debt accrues."""

        return self.available_credit + self.credit_balance


@dataclass(slots=True, frozen=True)
class MinoristaPosting:
    """Result of applying one entry to a minorista account."""

    before: MinoristaBalances
    after: MinoristaBalances
    credit_consumed: Decimal | None = None
    credit_used: Decimal = ZERO
    profit_earned: Decimal = ZERO
    balance_in_favor_used: Decimal = ZERO
    external_debt: Decimal = ZERO


@dataclass(slots=True, frozen=True)
class HoldComponents:
    """What a reserved DISCOUNT took from the account."""

    credit_used: Decimal
    balance_in_favor_used: Decimal
    external_debt: Decimal
    profit_earned: Decimal


@dataclass(slots=True, frozen=True)
class _Debit:
    balances: MinoristaBalances
    balance_in_favor_used: Decimal
    credit_used: Decimal
    external_debt: Decimal


def _require_positive(amount: Decimal) -> Decimal:
    amount = quantize_money(amount)
    if amount <= ZERO:
        raise ValueError("Amount must be greater than zero")
    return amount


def _credit(balances: MinoristaBalances, amount: Decimal) -> MinoristaBalances:
    # Outstanding external debt is settled first, then the credit line is
    # refilled up to its limit and any excess becomes balance in favor.
    debt_paid = min(balances.external_debt, amount)
    rest = amount - debt_paid
    room = max(balances.credit_limit - balances.available_credit, ZERO)
    refill = min(rest, room)
    return replace(
        balances,
        external_debt=balances.external_debt - debt_paid,
        available_credit=balances.available_credit + refill,
        credit_balance=balances.credit_balance + (rest - refill),
    )


def _debit(
    balances: MinoristaBalances,
    amount: Decimal,
    *,
    draw_balance_in_favor: bool,
) -> _Debit:
    balance_in_favor_used = (
        min(balances.credit_balance, amount) if draw_balance_in_favor else ZERO
    )
    rest = amount - balance_in_favor_used
    credit_used = min(max(balances.available_credit, ZERO), rest)
    external_debt = rest - credit_used
    return _Debit(
        balances=replace(
            balances,
            credit_balance=balances.credit_balance - balance_in_favor_used,
            available_credit=balances.available_credit - credit_used,
            external_debt=balances.external_debt + external_debt,
        ),
        balance_in_favor_used=balance_in_favor_used,
        credit_used=credit_used,
        external_debt=external_debt,
    )


def apply_recharge(
    balances: MinoristaBalances,
    amount: Decimal,
    *,
    to_balance_in_favor: bool = False,
) -> MinoristaPosting:
    """Fund the account, or credit balance in favor directly when asked."""

    amount = _require_positive(amount)
    if to_balance_in_favor:
        after = replace(balances, credit_balance=balances.credit_balance + amount)
    else:
        after = _credit(balances, amount)
    return MinoristaPosting(before=balances, after=after)


def apply_discount(
    balances: MinoristaBalances,
    amount: Decimal,
    profit_percentage: Decimal,
) -> MinoristaPosting:
    """Consume balance in favor, then credit, then accrue external debt.

    The minorista's share ``amount * profit_percentage`` is credited back to
    balance in favor after the draw.
    """

    amount = _require_positive(amount)
    debit = _debit(balances, amount, draw_balance_in_favor=True)
    profit_earned = quantize_money(amount * profit_percentage)
    after = replace(
        debit.balances,
        credit_balance=debit.balances.credit_balance + profit_earned,
    )
    return MinoristaPosting(
        before=balances,
        after=after,
        credit_consumed=amount,
        credit_used=debit.credit_used,
        profit_earned=profit_earned,
        balance_in_favor_used=debit.balance_in_favor_used,
        external_debt=debit.external_debt,
    )


def apply_adjustment(balances: MinoristaBalances, amount: Decimal) -> MinoristaPosting:
    """Apply a signed manual correction.

    Positive amounts behave as a recharge. Negative amounts reduce available
    credit down to zero and the remainder becomes external debt; balance in
    favor is left alone.
    """

    amount = quantize_money(amount)
    if amount == ZERO:
        raise ValueError("Adjustment amount cannot be zero")
    if amount > ZERO:
        return MinoristaPosting(before=balances, after=_credit(balances, amount))

    debit = _debit(balances, -amount, draw_balance_in_favor=False)
    return MinoristaPosting(
        before=balances,
        after=debit.balances,
        credit_used=debit.credit_used,
        external_debt=debit.external_debt,
    )


def apply_hold_reversal(
    balances: MinoristaBalances,
    hold: HoldComponents,
) -> MinoristaPosting:
    """Give back what a cancelled hold took and withdraw its profit rebate.

    With no entry in between, the result equals the balances before the hold.
    """

    debt_relief = min(balances.external_debt, hold.external_debt)
    refill_total = hold.credit_used + (hold.external_debt - debt_relief)
    room = max(balances.credit_limit - balances.available_credit, ZERO)
    refill = min(refill_total, room)
    restored = replace(
        balances,
        external_debt=balances.external_debt - debt_relief,
        available_credit=balances.available_credit + refill,
        credit_balance=(
            balances.credit_balance
            + hold.balance_in_favor_used
            + (refill_total - refill)
        ),
    )
    debit = _debit(restored, hold.profit_earned, draw_balance_in_favor=True)
    return MinoristaPosting(
        before=balances,
        after=debit.balances,
        credit_used=debit.credit_used,
        profit_earned=-hold.profit_earned,
        balance_in_favor_used=debit.balance_in_favor_used,
        external_debt=debit.external_debt,
    )


def apply_bank_movement(
    previous_balance: Decimal,
    movement_type: BankAccountTransactionType,
    amount: Decimal,
    fee: Decimal = ZERO,
) -> Decimal:
    """Return the account balance after one movement.

    DEPOSIT adds ``amount``, WITHDRAWAL subtracts it, ADJUSTMENT adds the
    signed amount; the fee is always charged. A result below zero is refused.
    """

    amount = quantize_money(amount)
    fee = quantize_money(fee)
    if fee < ZERO:
        raise ValueError("Fee cannot be negative")

    match movement_type:
        case BankAccountTransactionType.DEPOSIT:
            current = previous_balance + _require_positive(amount) - fee
        case BankAccountTransactionType.WITHDRAWAL:
            current = previous_balance - _require_positive(amount) - fee
        case BankAccountTransactionType.ADJUSTMENT:
            if amount == ZERO:
                raise ValueError("Adjustment amount cannot be zero")
            current = previous_balance + amount - fee
        case _:
            assert_never(movement_type)

    if current < ZERO:
        raise InsufficientBalanceError(
            details={
                "previous_balance": str(previous_balance),
                "amount": str(amount),
                "fee": str(fee),
            }
        )
    return current


class MinoristaEntrySnapshot(Protocol):
    """Snapshot fields of a persisted minorista entry."""

    sequence: int
    status: MinoristaTransactionStatus
    previous_available_credit: Decimal
    available_credit: Decimal
    previous_balance_in_favor: Decimal
    current_balance_in_favor: Decimal
    previous_external_debt: Decimal
    current_external_debt: Decimal


@dataclass(slots=True, frozen=True)
class ProjectedBalances:
    """Balances implied by the ledger."""

    available_credit: Decimal
    credit_balance: Decimal
    external_debt: Decimal


def project_minorista_balances(
    entries: Sequence[MinoristaEntrySnapshot],
) -> ProjectedBalances | None:
    """Return balances of the latest non-cancelled entry, if any."""

    effective = [
        entry
        for entry in entries
        if entry.status != MinoristaTransactionStatus.CANCELLED
    ]
    if not effective:
        return None
    latest = max(effective, key=lambda entry: entry.sequence)
    return ProjectedBalances(
        available_credit=latest.available_credit,
        credit_balance=latest.current_balance_in_favor,
        external_debt=latest.current_external_debt,
    )


def find_snapshot_breaks(entries: Sequence[MinoristaEntrySnapshot]) -> list[int]:
    """Return sequences whose previous snapshot differs from the prior entry."""

    ordered = sorted(entries, key=lambda entry: entry.sequence)
    breaks: list[int] = []
    for prior, entry in zip(ordered, ordered[1:]):
        if (
            entry.previous_available_credit != prior.available_credit
            or entry.previous_balance_in_favor != prior.current_balance_in_favor
            or entry.previous_external_debt != prior.current_external_debt
        ):
            breaks.append(entry.sequence)
    return breaks
