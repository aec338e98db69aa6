"""Resident income tax: reliefs, taxable income and bracket tax."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from functools import lru_cache

from fincompare.backend.app.models import ReliefCategory, TaxSummary
from fincompare.backend.config.year_config import (
    IncomeTaxConfig,
    YearConfiguration,
    load_year_configuration,
)

from .brackets import BracketTable


def clamp_relief_amount(value: float, cap: float) -> float:
    """Clamp an entered relief amount to ``[0, cap]``."""

    if value <= 0:
        return 0.0
    return min(value, cap)


def total_reliefs(reliefs: Iterable[ReliefCategory]) -> float:
    return sum((relief.applied_amount for relief in reliefs), 0.0)


class TaxEngine:
    """Pure computation of a :class:`TaxSummary` from income and reliefs."""

    def __init__(self, bracket_table: BracketTable) -> None:
        self._table = bracket_table

    @classmethod
    def from_config(cls, config: IncomeTaxConfig) -> TaxEngine:
        return cls(BracketTable(config.brackets))

    @property
    def bracket_table(self) -> BracketTable:
        return self._table

    def compute_summary(
        self, gross_income: float, reliefs: Iterable[ReliefCategory]
    ) -> TaxSummary:
        gross = gross_income if gross_income > 0 else 0.0
        reliefs_total = total_reliefs(reliefs)
        taxable = max(0.0, gross - reliefs_total)
        tax = self._table.tax_for(taxable)
        effective_rate = tax / gross * 100 if gross > 0 else 0.0

        return TaxSummary(
            gross_income=gross,
            total_reliefs=reliefs_total,
            taxable_income=taxable,
            total_tax=tax,
            net_income=gross - tax,
            effective_rate=effective_rate,
            marginal_rate=self._table.rate_at(taxable),
        )


@lru_cache(maxsize=8)
def engine_for_year(year: int) -> TaxEngine:
    """Return the engine built from the configured brackets for ``year``."""

    return TaxEngine.from_config(load_year_configuration(year).income_tax)


def default_relief_amounts(config: YearConfiguration) -> dict[str, float]:
    """Amounts the calculator starts from (and resets to)."""

    return {
        relief.id: relief.default_amount for relief in config.income_tax.reliefs
    }


def build_reliefs(
    config: YearConfiguration, amounts: Mapping[str, float]
) -> list[ReliefCategory]:
    """Combine configured categories with entered amounts.

    Categories missing from ``amounts`` use their default amount. Unknown
    identifiers raise ``ValueError``.
    """

    known = {relief.id for relief in config.income_tax.reliefs}
    unknown = sorted(set(amounts) - known)
    if unknown:
        raise ValueError(f"Unknown relief categories: {', '.join(unknown)}")

    return [
        ReliefCategory(
            id=relief.id,
            cap=relief.cap,
            current_amount=amounts.get(relief.id, relief.default_amount),
            description=relief.description,
            label=relief.label,
        )
        for relief in config.income_tax.reliefs
    ]


__all__ = [
    "TaxEngine",
    "build_reliefs",
    "clamp_relief_amount",
    "default_relief_amounts",
    "engine_for_year",
    "total_reliefs",
]
