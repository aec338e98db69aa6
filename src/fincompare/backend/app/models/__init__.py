"""Typed request/response models shared across the backend services.

Pydantic models validate everything that crosses the HTTP boundary (calculation
payloads and remote listing rows) while lightweight frozen dataclasses carry
derived results between the calculators and the response builders.
"""

from __future__ import annotations

from dataclasses import dataclass

from .api import (
    BracketBreakdownEntry,
    CalculationRequest,
    CalculationResponse,
    DisplayValues,
    ReliefBreakdownEntry,
    ResponseMeta,
    Summary,
    format_validation_error,
)
from .records import (
    CryptoBroker,
    FixedDeposit,
    ListingRecord,
    MoneyMarketFund,
    StockBroker,
)

__all__ = [
    "BracketBreakdownEntry",
    "CalculationRequest",
    "CalculationResponse",
    "CryptoBroker",
    "DisplayValues",
    "FixedDeposit",
    "ListingRecord",
    "MoneyMarketFund",
    "ReliefBreakdownEntry",
    "ReliefCategory",
    "ResponseMeta",
    "StockBroker",
    "Summary",
    "TaxSummary",
    "format_validation_error",
]


@dataclass(frozen=True)
class ReliefCategory:
    """A capped deduction together with the amount the user entered."""

    id: str
    cap: float
    current_amount: float
    description: str = ""
    label: str = ""

    @property
    def applied_amount(self) -> float:
        """Contribution towards total reliefs, clamped to ``[0, cap]``."""

        amount = self.current_amount if self.current_amount > 0 else 0.0
        cap = self.cap if self.cap > 0 else 0.0
        return min(amount, cap)

    @property
    def over_cap(self) -> bool:
        return self.current_amount > self.cap


@dataclass(frozen=True)
class TaxSummary:
    """Derived income tax figures; never stored."""

    gross_income: float
    total_reliefs: float
    taxable_income: float
    total_tax: float
    net_income: float
    effective_rate: float
    marginal_rate: float
