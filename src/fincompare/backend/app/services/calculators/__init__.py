"""Domain-specific calculation helpers."""

from .brackets import BracketPortion, BracketTable
from .income_tax import (
    TaxEngine,
    build_reliefs,
    clamp_relief_amount,
    default_relief_amounts,
    engine_for_year,
    total_reliefs,
)
from .utils import format_currency, format_percentage, round_currency, round_rate

__all__ = [
    "BracketPortion",
    "BracketTable",
    "TaxEngine",
    "build_reliefs",
    "clamp_relief_amount",
    "default_relief_amounts",
    "engine_for_year",
    "format_currency",
    "format_percentage",
    "round_currency",
    "round_rate",
    "total_reliefs",
]
