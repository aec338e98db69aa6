#!/usr/bin/env python3
"""Time the tax calculation paths the calculator form hits on every keystroke."""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from time import perf_counter

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from fincompare.backend.app.services.calculation_service import (  # noqa: E402
    calculate_tax,
    compute_summary,
)
from fincompare.backend.app.services.calculators import build_reliefs  # noqa: E402
from fincompare.backend.config.year_config import (  # noqa: E402
    default_year,
    load_year_configuration,
)

SAMPLE_PAYLOAD = {
    "gross_income": 100000,
    "reliefs": {"personal": 9000, "epf": 4000, "medical": 2500},
}


def _timed(iterations: int, func) -> dict[str, float]:
    func()  # Warm caches
    start = perf_counter()
    for _ in range(iterations):
        func()
    elapsed = perf_counter() - start
    return {
        "iterations": iterations,
        "total_ms": elapsed * 1000,
        "average_ms": (elapsed / iterations) * 1000,
    }


def measure_request_path(iterations: int) -> dict[str, float]:
    """Full payload validation, calculation and response serialisation."""

    return _timed(iterations, lambda: calculate_tax(dict(SAMPLE_PAYLOAD)))


def measure_engine(iterations: int) -> dict[str, float]:
    """Engine only, sweeping incomes across every bracket."""

    config = load_year_configuration(default_year())
    reliefs = build_reliefs(config, SAMPLE_PAYLOAD["reliefs"])
    incomes = [amount * 1_000 for amount in range(0, 2_500, 25)]

    def sweep() -> None:
        for income in incomes:
            compute_summary(income, reliefs, year=config.year)

    return _timed(iterations, sweep)


def main() -> None:
    iterations = int(os.getenv("FINCOMPARE_PROFILE_ITERATIONS", "200"))
    report = {
        "request_path": measure_request_path(iterations),
        "engine_sweep": measure_engine(max(1, iterations // 10)),
    }
    print(json.dumps(report, indent=2, sort_keys=True))


if __name__ == "__main__":
    main()
