"""Decimal helpers for money, exchange rates and percentages."""

from decimal import ROUND_HALF_UP, Decimal

MONEY_PRECISION = Decimal("0.01")
RATE_PRECISION = Decimal("0.0001")
ZERO = Decimal("0.00")


def quantize_money(value: Decimal) -> Decimal:
    """Return value rounded to two decimal places with HALF_UP strategy."""

    return value.quantize(MONEY_PRECISION, rounding=ROUND_HALF_UP)


def quantize_rate(value: Decimal) -> Decimal:
    """Return a rate or percentage rounded to four decimal places."""

    return value.quantize(RATE_PRECISION, rounding=ROUND_HALF_UP)


def parse_money(value: str) -> Decimal:
    """Parse and normalize input money string into Decimal."""

    return quantize_money(Decimal(value))


def format_money(value: Decimal) -> str:
    """Render money as string with exactly two decimal places."""

    return f"{quantize_money(value):.2f}"


def format_rate(value: Decimal) -> str:
    """Render a rate with exactly four decimal places."""

    return f"{quantize_rate(value):.4f}"
