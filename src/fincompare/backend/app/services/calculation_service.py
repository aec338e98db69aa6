"""Orchestrate request validation, relief normalisation and tax calculation.

The calculation service coordinates the request models and the year-based
configuration so that the engine itself stays a pure function of income,
reliefs and the bracket table. Profiling hooks and payload validation live
here to give the routes a single ``calculate_tax`` entry point.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from contextlib import contextmanager
from time import perf_counter
from typing import Any

from pydantic import ValidationError

from fincompare.backend.app.models import (
    CalculationRequest,
    CalculationResponse,
    ReliefCategory,
    TaxSummary,
    format_validation_error,
)
from fincompare.backend.config.year_config import (
    YearConfiguration,
    default_year,
    load_year_configuration,
)

from .calculators import (
    build_reliefs,
    clamp_relief_amount,
    engine_for_year,
    format_currency,
    format_percentage,
    round_currency,
    round_rate,
)

_LOGGER = logging.getLogger(__name__)


def _profiling_enabled() -> bool:
    """Return ``True`` when calculation profiling should be captured."""

    flag = os.getenv("FINCOMPARE_PROFILE_CALCULATIONS", "")
    return flag.strip().lower() in {"1", "true", "yes", "on"}


@contextmanager
def _profile_section(name: str, store: dict[str, float] | None):
    """Capture the duration of a named section when profiling is enabled."""

    if store is None:
        yield
        return

    start = perf_counter()
    try:
        yield
    finally:
        store[name] = perf_counter() - start


def compute_summary(
    gross_income: float,
    reliefs: Iterable[ReliefCategory],
    *,
    year: int | None = None,
) -> TaxSummary:
    """Compute the tax summary using the bracket table for ``year``."""

    engine = engine_for_year(year if year is not None else default_year())
    return engine.compute_summary(gross_income, reliefs)


def _validate_request(payload: Mapping[str, Any] | CalculationRequest) -> CalculationRequest:
    if isinstance(payload, CalculationRequest):
        data: Any = payload.model_dump(mode="python")
    elif isinstance(payload, Mapping):
        data = payload
    else:
        raise ValueError("Payload must be a mapping")

    try:
        return CalculationRequest.model_validate(data)
    except ValidationError as exc:
        raise ValueError(format_validation_error(exc)) from exc


def _load_configuration(year: int | None) -> YearConfiguration:
    target = year if year is not None else default_year()
    try:
        return load_year_configuration(target)
    except FileNotFoundError as exc:
        raise ValueError(f"Tax year {target} is not supported") from exc


def _relief_rows(reliefs: Iterable[ReliefCategory]) -> list[dict[str, Any]]:
    return [
        {
            "id": relief.id,
            "label": relief.label,
            "description": relief.description,
            "cap": round_currency(relief.cap),
            "entered": round_currency(relief.current_amount),
            "applied": round_currency(clamp_relief_amount(relief.current_amount, relief.cap)),
            "over_cap": relief.over_cap,
        }
        for relief in reliefs
    ]


def calculate_tax(payload: Mapping[str, Any] | CalculationRequest) -> dict[str, Any]:
    """Compute the tax summary and breakdown for the provided payload."""

    request_model = _validate_request(payload)

    timings: dict[str, float] | None = {} if _profiling_enabled() else None
    overall_start = perf_counter() if timings is not None else None

    config = _load_configuration(request_model.year)
    engine = engine_for_year(config.year)

    with _profile_section("reliefs", timings):
        reliefs = build_reliefs(config, request_model.reliefs)

    with _profile_section("summary", timings):
        summary = engine.compute_summary(request_model.gross_income, reliefs)
        portions = engine.bracket_table.portions(summary.taxable_income)

    if timings is not None and overall_start is not None:
        timings["total"] = perf_counter() - overall_start
        _LOGGER.debug(
            "calculate_tax timings (ms): %s",
            {name: round(duration * 1000, 3) for name, duration in timings.items()},
        )

    currency = config.currency
    response_model = CalculationResponse.model_validate(
        {
            "summary": {
                "gross_income": round_currency(summary.gross_income),
                "total_reliefs": round_currency(summary.total_reliefs),
                "taxable_income": round_currency(summary.taxable_income),
                "total_tax": round_currency(summary.total_tax),
                "net_income": round_currency(summary.net_income),
                "net_monthly_income": round_currency(summary.net_income / 12),
                "effective_rate": round_rate(summary.effective_rate),
                "marginal_rate": summary.marginal_rate,
            },
            "reliefs": _relief_rows(reliefs),
            "brackets": [
                {
                    "lower": portion.bracket.lower_bound,
                    "upper": portion.bracket.upper_bound,
                    "rate": portion.bracket.rate,
                    "taxable_amount": round_currency(portion.taxable_amount),
                    "tax": round_currency(portion.tax),
                }
                for portion in portions
            ],
            "display": {
                "gross_income": format_currency(summary.gross_income, currency),
                "total_reliefs": format_currency(summary.total_reliefs, currency),
                "taxable_income": format_currency(summary.taxable_income, currency),
                "total_tax": format_currency(summary.total_tax, currency),
                "net_income": format_currency(summary.net_income, currency),
                "effective_rate": f"{summary.effective_rate:.2f}%",
                "marginal_rate": format_percentage(summary.marginal_rate),
            },
            "meta": {"year": config.year, "currency": currency},
        }
    )

    return response_model.model_dump(mode="json")


__all__ = ["calculate_tax", "compute_summary"]
