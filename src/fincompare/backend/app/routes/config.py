"""Expose tax year configuration consumed by the calculator form.

The form needs the relief categories (with caps and reset defaults) and the
bracket table to render hints without duplicating the YAML configuration.
"""

from __future__ import annotations

from typing import Any

from flask import Blueprint, jsonify

from fincompare.backend.app.http import not_found
from fincompare.backend.app.services.calculators import (
    default_relief_amounts,
    format_percentage,
)
from fincompare.backend.config.year_config import (
    YearConfiguration,
    available_years,
    load_manifest,
    load_year_configuration,
)
from fincompare.backend.version import get_project_version

blueprint = Blueprint("config", __name__, url_prefix="/api/v1/config")


def get_configuration_metadata() -> dict[str, Any]:
    """Expose runtime metadata derived from the configuration manifest."""

    supported_years = list(load_manifest().supported_years)
    return {
        "version": get_project_version(),
        "supported_years": supported_years,
        "default_year": supported_years[-1] if supported_years else None,
    }


def _serialise_tax_configuration(config: YearConfiguration) -> dict[str, Any]:
    income_tax = config.income_tax
    return {
        "year": config.year,
        "meta": dict(config.meta),
        "currency": config.currency,
        "brackets": [
            {
                "lower": bracket.lower_bound,
                "upper": bracket.upper_bound,
                "rate": bracket.rate,
                "rate_label": format_percentage(bracket.rate),
            }
            for bracket in income_tax.brackets
        ],
        "reliefs": [
            relief.model_dump(mode="json") for relief in income_tax.reliefs
        ],
        "defaults": default_relief_amounts(config),
    }


@blueprint.get("/years")
def list_years() -> Any:
    """Return the tax years the calculator supports."""

    return jsonify(get_configuration_metadata())


@blueprint.get("/<int:year>/tax")
def get_tax_configuration(year: int) -> Any:
    """Return brackets and relief categories for ``year``."""

    if year not in available_years():
        return not_found("tax year", year).to_response()
    return jsonify(_serialise_tax_configuration(load_year_configuration(year)))
