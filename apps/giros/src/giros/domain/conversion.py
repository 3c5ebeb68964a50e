"""Conversion of giro input amounts into bolivares."""

from __future__ import annotations

from decimal import Decimal
from typing import Protocol, assert_never

from giros.db.models.bank import Currency
from giros.domain.money import quantize_money


class ConversionRate(Protocol):
    """Rate fields used to price a giro in VES."""

    sell_rate: Decimal
    bcv: Decimal


def amount_in_bolivares(
    amount_input: Decimal,
    currency_input: Currency,
    rate: ConversionRate,
) -> Decimal:
    """Return the VES amount the beneficiary receives, half-up to cents."""

    match currency_input:
        case Currency.USD:
            amount = amount_input * rate.bcv
        case Currency.COP:
            amount = amount_input / rate.sell_rate
        case Currency.VES:
            amount = amount_input
        case _:
            assert_never(currency_input)
    return quantize_money(amount)
