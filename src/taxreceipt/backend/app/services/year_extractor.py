"""Guess the fiscal year of an uploaded return from its filename."""

from __future__ import annotations

import re
from datetime import date

YEAR_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"(?:^|[_\-\s])(\d{4})(?:[_\-\s]|\.pdf$)", re.IGNORECASE),
    re.compile(r"(?:TY|FY)(\d{4})", re.IGNORECASE),
    re.compile(r"(\d{4})[-_](?:1040|tax|return)", re.IGNORECASE),
    re.compile(r"(?:1040|tax|return)[-_](\d{4})", re.IGNORECASE),
    re.compile(r"^(\d{4})\.pdf$", re.IGNORECASE),
)

MIN_YEAR = 1990


def _is_valid_year(year: int, today: date | None = None) -> bool:
    max_year = (today or date.today()).year + 1
    return MIN_YEAR <= year <= max_year


def extract_year_from_filename(filename: str, *, today: date | None = None) -> int | None:
    """Return the first plausible year found in ``filename``, else ``None``."""

    for pattern in YEAR_PATTERNS:
        match = pattern.search(filename)
        if match:
            year = int(match.group(1))
            if _is_valid_year(year, today):
                return year
    return None


__all__ = ["MIN_YEAR", "YEAR_PATTERNS", "extract_year_from_filename"]
