"""Profit calculation for settled giros."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol, assert_never

from giros.db.models.giro import ExecutionType
from giros.domain.errors import PreconditionFailedError, compose_error_message
from giros.domain.money import ZERO, quantize_money


class RateSnapshot(Protocol):
    """Rate fields the profit formula reads."""

    buy_rate: Decimal
    sell_rate: Decimal


@dataclass(slots=True, frozen=True)
class ProfitBreakdown:
    """Total profit and its split between platform and minorista."""

    total_profit: Decimal
    system_profit: Decimal
    minorista_profit: Decimal


def spread_profit(amount_input: Decimal, rate: RateSnapshot) -> Decimal:
    """Return the exchange spread earned on amount_input, unrounded."""

    if rate.sell_rate <= 0:
        raise PreconditionFailedError(
            message=compose_error_message(
                cause="The rate snapshot has a non-positive sell rate.",
                action="Publish a valid rate and retry.",
            )
        )
    return amount_input - (amount_input / rate.sell_rate * rate.buy_rate)


def calculate_profit(
    amount_input: Decimal,
    rate: RateSnapshot,
    execution_type: ExecutionType,
    minorista_profit_percentage: Decimal | None,
    commission: Decimal | None = None,
) -> ProfitBreakdown:
    """Compute total, minorista and system profit for one giro.

    Rate-mediated channels (PAGO_MOVIL, RECARGA) earn the buy/sell spread.
    Every other channel earns the agreed commission. The minorista share is
    ``amount_input * minorista_profit_percentage`` when the giro belongs to a
    minorista (percentage given) and zero otherwise; the platform keeps the
    rest, which may be negative.
    """

    match execution_type:
        case ExecutionType.PAGO_MOVIL | ExecutionType.RECARGA:
            total = spread_profit(amount_input, rate)
        case (
            ExecutionType.TRANSFERENCIA
            | ExecutionType.EFECTIVO
            | ExecutionType.ZELLE
            | ExecutionType.OTROS
        ):
            total = commission if commission is not None else ZERO
        case _:
            assert_never(execution_type)

    total_profit = quantize_money(total)
    if minorista_profit_percentage is None:
        minorista_profit = ZERO
    else:
        minorista_profit = quantize_money(amount_input * minorista_profit_percentage)
    return ProfitBreakdown(
        total_profit=total_profit,
        system_profit=total_profit - minorista_profit,
        minorista_profit=minorista_profit,
    )
