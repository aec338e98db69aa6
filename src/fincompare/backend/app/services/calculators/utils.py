"""Utility helpers for calculator modules."""

from __future__ import annotations


def format_percentage(value: float) -> str:
    """Return a human-readable label for a rate already expressed in percent."""

    if float(int(value)) == value:
        return f"{int(value)}%"
    return f"{value:.2f}%"


def format_currency(value: float, symbol: str = "RM") -> str:
    """Render ``value`` with two fixed decimals and thousands separators."""

    sign = "-" if value < 0 else ""
    return f"{sign}{symbol} {abs(value):,.2f}"


def round_currency(value: float) -> float:
    """Round monetary amounts to two decimals."""

    return round(value, 2)


def round_rate(value: float) -> float:
    """Round percentage rates to two decimals."""

    return round(value, 2)
