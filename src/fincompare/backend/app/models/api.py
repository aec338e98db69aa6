"""Pydantic models describing the public calculation API surface."""

from __future__ import annotations

from collections.abc import Mapping
from numbers import Real
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

__all__ = [
    "BracketBreakdownEntry",
    "CalculationRequest",
    "CalculationResponse",
    "DisplayValues",
    "ReliefBreakdownEntry",
    "ResponseMeta",
    "Summary",
    "format_validation_error",
]


def _clamp_non_negative(value: Any) -> Any:
    # Numeric inputs below zero are treated as "nothing entered".
    if isinstance(value, Real) and not isinstance(value, bool) and value < 0:
        return 0.0
    return value


class CalculationRequest(BaseModel):
    """Income and relief amounts submitted by the calculator form."""

    model_config = ConfigDict(extra="forbid")

    year: int | None = Field(default=None, ge=1900, le=2100)
    gross_income: float = 0.0
    reliefs: dict[str, float] = Field(default_factory=dict)

    @field_validator("gross_income", mode="before")
    @classmethod
    def _clamp_income(cls, value: Any) -> Any:
        if value is None:
            return 0.0
        return _clamp_non_negative(value)

    @field_validator("reliefs", mode="before")
    @classmethod
    def _clamp_reliefs(cls, value: Any) -> Any:
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            return value
        return {
            str(key).strip(): 0.0 if amount is None else _clamp_non_negative(amount)
            for key, amount in value.items()
        }


class Summary(BaseModel):
    """Aggregated calculation results."""

    model_config = ConfigDict(extra="forbid")

    gross_income: float
    total_reliefs: float
    taxable_income: float
    total_tax: float
    net_income: float
    net_monthly_income: float
    effective_rate: float
    marginal_rate: float


class ReliefBreakdownEntry(BaseModel):
    """Per-category relief figures for the input surface."""

    model_config = ConfigDict(extra="forbid")

    id: str
    label: str
    description: str
    cap: float
    entered: float
    applied: float
    over_cap: bool


class BracketBreakdownEntry(BaseModel):
    """Contribution of a single band to the total tax."""

    model_config = ConfigDict(extra="forbid")

    lower: float
    upper: float | None
    rate: float
    taxable_amount: float
    tax: float


class DisplayValues(BaseModel):
    """Fixed-decimal strings ready for rendering."""

    model_config = ConfigDict(extra="forbid")

    gross_income: str
    total_reliefs: str
    taxable_income: str
    total_tax: str
    net_income: str
    effective_rate: str
    marginal_rate: str


class ResponseMeta(BaseModel):
    """Metadata describing the calculation context."""

    model_config = ConfigDict(extra="forbid")

    year: int
    currency: str


class CalculationResponse(BaseModel):
    """Top-level response returned by the calculation endpoint."""

    model_config = ConfigDict(extra="forbid")

    summary: Summary
    reliefs: list[ReliefBreakdownEntry]
    brackets: list[BracketBreakdownEntry]
    display: DisplayValues
    meta: ResponseMeta


def format_validation_error(error: ValidationError) -> str:
    """Return a concise human-readable description of validation issues."""

    messages: list[str] = []
    for issue in error.errors():
        location = ".".join(str(part) for part in issue.get("loc", ()))
        message = issue.get("msg", "Invalid value")
        if location:
            messages.append(f"{location}: {message}")
        else:
            messages.append(message)

    details = "; ".join(messages) if messages else str(error)
    return f"Invalid calculation payload: {details}"
