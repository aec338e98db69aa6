"""Progressive bracket table lookups."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from fincompare.backend.config.year_config import (
    ConfigurationError,
    TaxBracket,
)
from fincompare.backend.config.schema import ensure_contiguous_brackets


@dataclass(frozen=True)
class BracketPortion:
    """Share of a taxable amount that falls inside one bracket."""

    bracket: TaxBracket
    taxable_amount: float

    @property
    def tax(self) -> float:
        return self.taxable_amount * self.bracket.rate / 100


class BracketTable:
    """Immutable ordered set of bands mapping income to a marginal rate.

    Bands are closed at their upper bound and each band starts where the
    previous one ends, so ``tax_for`` is continuous at every boundary.
    """

    def __init__(self, brackets: Sequence[TaxBracket]) -> None:
        ordered = tuple(brackets)
        ensure_contiguous_brackets(ordered)
        self._brackets = ordered

    @property
    def brackets(self) -> tuple[TaxBracket, ...]:
        return self._brackets

    def __len__(self) -> int:
        return len(self._brackets)

    def __iter__(self) -> Iterator[TaxBracket]:
        return iter(self._brackets)

    def bracket_at(self, taxable_income: float) -> TaxBracket:
        """Return the single bracket containing ``taxable_income``."""

        amount = taxable_income if taxable_income > 0 else 0.0
        for bracket in self._brackets:
            if bracket.contains(amount):
                return bracket
        raise ConfigurationError(f"No tax bracket covers an income of {amount}")

    def rate_at(self, taxable_income: float) -> float:
        """Return the marginal rate (percent) applied to ``taxable_income``."""

        return self.bracket_at(taxable_income).rate

    def portions(self, taxable_income: float) -> list[BracketPortion]:
        """Split ``taxable_income`` across the brackets it reaches."""

        if taxable_income <= 0:
            return []

        portions: list[BracketPortion] = []
        for bracket in self._brackets:
            if taxable_income <= bracket.lower_bound:
                break
            upper = bracket.upper_bound
            ceiling = taxable_income if upper is None else min(taxable_income, upper)
            portions.append(BracketPortion(bracket, ceiling - bracket.lower_bound))
        return portions

    def tax_for(self, taxable_income: float) -> float:
        """Calculate progressive tax owed on ``taxable_income``."""

        return sum((portion.tax for portion in self.portions(taxable_income)), 0.0)
