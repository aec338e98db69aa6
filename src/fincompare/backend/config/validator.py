"""Utilities for validating year configuration data and surfacing issues."""

from __future__ import annotations

import argparse
from collections import Counter
from typing import Sequence

from .year_config import (
    ReliefCategoryConfig,
    TaxBracket,
    YearConfiguration,
    available_years,
    load_year_configuration,
)


def _format_scope(scope: str, message: str) -> str:
    return f"{scope}: {message}"


def _validate_brackets(brackets: Sequence[TaxBracket]) -> list[str]:
    errors: list[str] = []
    scope = "income_tax.brackets"

    previous_rate: float | None = None
    for index, bracket in enumerate(brackets):
        if bracket.rate > 100:
            errors.append(
                _format_scope(
                    f"{scope}[{index}]",
                    f"rate {bracket.rate} must be expressed as a percentage between 0 and 100",
                )
            )
        if previous_rate is not None and bracket.rate < previous_rate:
            errors.append(
                _format_scope(
                    f"{scope}[{index}]",
                    f"rate {bracket.rate} is lower than the preceding band ({previous_rate})",
                )
            )
        previous_rate = bracket.rate

    return errors


def _validate_reliefs(reliefs: Sequence[ReliefCategoryConfig]) -> list[str]:
    errors: list[str] = []
    scope = "income_tax.reliefs"

    duplicates = [
        relief_id
        for relief_id, count in Counter(relief.id for relief in reliefs).items()
        if count > 1
    ]
    if duplicates:
        errors.append(
            _format_scope(scope, f"duplicate relief identifiers detected: {sorted(duplicates)}")
        )

    for relief in reliefs:
        if relief.default_amount > relief.cap:
            errors.append(
                _format_scope(
                    f"{scope}.{relief.id}",
                    "default amount cannot exceed the relief cap",
                )
            )
        if not relief.label.strip():
            errors.append(_format_scope(f"{scope}.{relief.id}", "label must be non-empty"))

    return errors


def _validate_meta(config: YearConfiguration) -> list[str]:
    errors: list[str] = []
    source_url = config.meta.get("source_url")
    if source_url and not str(source_url).startswith(("http://", "https://")):
        errors.append(_format_scope("meta", "source URL must be absolute"))
    if not config.currency.strip():
        errors.append(_format_scope("meta", "currency symbol must be non-empty"))
    return errors


def validate_year_configuration(config: YearConfiguration) -> list[str]:
    """Return a list of validation issues for the provided configuration."""

    errors: list[str] = []

    errors.extend(_validate_brackets(config.income_tax.brackets))
    errors.extend(_validate_reliefs(config.income_tax.reliefs))
    errors.extend(_validate_meta(config))

    return errors


def validate_all_years(years: Sequence[int] | None = None) -> dict[int, list[str]]:
    """Validate all configured years and return issues keyed by year."""

    targets = years or available_years()
    results: dict[int, list[str]] = {}

    for year in targets:
        config = load_year_configuration(year)
        results[int(year)] = validate_year_configuration(config)

    return results


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate configured tax years and report issues helpful to contributors."
    )
    parser.add_argument(
        "years",
        nargs="*",
        type=int,
        help="Specific years to validate (defaults to all configured years)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for running validations from the command line."""

    parser = _build_argument_parser()
    args = parser.parse_args(argv)
    years = args.years or available_years()

    if not years:
        parser.print_help()
        return 1

    exit_code = 0

    for year in years:
        try:
            config = load_year_configuration(year)
        except FileNotFoundError as error:
            print(f"[{year}] failed to load configuration: {error}")
            exit_code = 1
            continue

        issues = validate_year_configuration(config)
        if issues:
            exit_code = 1
            print(f"[{year}] {len(issues)} issue(s) detected:")
            for issue in issues:
                print(f"  - {issue}")
        else:
            print(f"[{year}] OK")

    return exit_code


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    raise SystemExit(main())
