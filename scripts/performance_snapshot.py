#!/usr/bin/env python3
"""Collect baseline timings for the three calculation engines."""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from time import perf_counter
from typing import Callable

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from taxreceipt.backend.app.models import (  # noqa: E402
    PageCategory,
    PageClassification,
    load_year_records,
)
from taxreceipt.backend.app.services.calculation_service import calculate_tax  # noqa: E402
from taxreceipt.backend.app.services.page_selection import select_pages  # noqa: E402
from taxreceipt.backend.app.services.summary_service import aggregate_summary  # noqa: E402

SAMPLE_PAYLOAD = {
    "year": 2024,
    "taxable_income": 97500,
    "household": {"has_qualifying_cover": True, "outstanding_loan_balance": 25000},
}

SAMPLE_PAGES = [
    PageClassification(page_number=index + 1, category=category)
    for index, category in enumerate(list(PageCategory) * 5)
]


def _sample_returns() -> dict[str, dict[str, object]]:
    returns: dict[str, dict[str, object]] = {}
    for offset, year in enumerate(range(2020, 2025)):
        income = 80000 + offset * 5000
        returns[str(year)] = {
            "year": year,
            "location": {"state": "VIC"},
            "income": {"items": [{"label": "Wages", "amount": income}], "total": income},
            "taxableIncome": income,
            "tax": {
                "grossTax": income * 0.2,
                "medicareLevy": income * 0.02,
                "totalTaxBeforeOffsets": income * 0.22,
                "taxPayable": income * 0.22,
            },
            "paygWithholding": {"total": income * 0.23},
            "result": {"refundOrOwing": income * 0.01, "isRefund": True},
        }
    return returns


def _measure(action: Callable[[], object], iterations: int) -> dict[str, float]:
    action()  # Warm caches
    start = perf_counter()
    for _ in range(iterations):
        action()
    elapsed = perf_counter() - start
    return {
        "iterations": iterations,
        "total_ms": elapsed * 1000,
        "average_ms": (elapsed / iterations) * 1000,
    }


def main() -> None:
    iterations = int(os.getenv("TAXRECEIPT_PROFILE_ITERATIONS", "75"))
    records = load_year_records(_sample_returns())
    report = {
        "calculation": _measure(lambda: calculate_tax(dict(SAMPLE_PAYLOAD)), iterations),
        "page_selection": _measure(lambda: select_pages(SAMPLE_PAGES), iterations),
        "aggregation": _measure(lambda: aggregate_summary(records), iterations),
    }
    print(json.dumps(report, indent=2, sort_keys=True))


if __name__ == "__main__":
    main()
