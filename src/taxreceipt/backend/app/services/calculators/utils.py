"""Utility helpers for calculator modules."""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Callable, Sequence
from typing import TypeVar

_Entry = TypeVar("_Entry")


def format_percentage(value: float) -> str:
    """Return a human-readable percentage label for ``value``."""

    percentage = round(value * 100, 4)
    if float(int(percentage)) == percentage:
        return f"{int(percentage)}%"
    return f"{percentage:.2f}%"


def format_currency(value: float) -> str:
    """Return a whole-dollar label such as ``$18,200`` or ``-$500``."""

    amount = round(value)
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,}"


def find_applicable(
    entries: Sequence[_Entry],
    amount: float,
    threshold: Callable[[_Entry], float],
) -> _Entry | None:
    """Return the last entry whose threshold is at or below ``amount``.

    ``entries`` must be sorted ascending by threshold. ``None`` is returned when
    ``amount`` sits below the first threshold.
    """

    keys = [threshold(entry) for entry in entries]
    position = bisect_right(keys, amount)
    if position == 0:
        return None
    return entries[position - 1]


def round_currency(value: float) -> float:
    """Round monetary amounts to two decimals."""

    return round(value, 2)


def round_rate(value: float) -> float:
    """Round rate values to four decimals."""

    return round(value, 4)
