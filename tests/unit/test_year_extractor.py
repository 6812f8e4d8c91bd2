"""Unit tests for filename-based year detection."""

from __future__ import annotations

from datetime import date

import pytest

from taxreceipt.backend.app.services.year_extractor import extract_year_from_filename

TODAY = date(2024, 10, 1)


@pytest.mark.parametrize(
    ("filename", "expected"),
    [
        ("2023_return.pdf", 2023),
        ("TaxReturn_FY2022.pdf", 2022),
        ("ty2021-summary.pdf", 2021),
        ("1040-2021.pdf", 2021),
        ("return_2020.pdf", 2020),
        ("2019-tax.pdf", 2019),
        ("2025.pdf", 2025),
    ],
)
def test_detects_year_from_common_patterns(filename: str, expected: int) -> None:
    assert extract_year_from_filename(filename, today=TODAY) == expected


@pytest.mark.parametrize(
    "filename",
    ["scan.pdf", "2099 return.pdf", "statement_1985.pdf", ""],
)
def test_returns_none_without_plausible_year(filename: str) -> None:
    assert extract_year_from_filename(filename, today=TODAY) is None
