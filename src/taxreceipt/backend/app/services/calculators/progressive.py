"""Progressive income tax calculated from cumulative bracket tables."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from taxreceipt.backend.config.year_config import TaxBracket

from .utils import find_applicable, format_currency


@dataclass(frozen=True, slots=True)
class BracketPortion:
    """Share of taxable income falling inside a single bracket."""

    label: str
    amount_in_bracket: float
    tax_on_bracket: float
    rate: float


def _applicable_bracket(amount: float, brackets: Sequence[TaxBracket]) -> TaxBracket | None:
    return find_applicable(brackets, amount, lambda bracket: bracket.threshold)


def calculate_income_tax(amount: float, brackets: Sequence[TaxBracket]) -> float:
    """Calculate progressive tax for ``amount`` using cumulative ``brackets``."""

    bracket = _applicable_bracket(amount, brackets)
    if bracket is None:
        return 0.0
    return bracket.base + (amount - bracket.threshold) * bracket.rate


def marginal_rate(amount: float, brackets: Sequence[TaxBracket]) -> float:
    """Return the rate applied to the next dollar of ``amount``."""

    bracket = _applicable_bracket(amount, brackets)
    return bracket.rate if bracket is not None else 0.0


def calculate_bracket_breakdown(
    amount: float, brackets: Sequence[TaxBracket]
) -> list[BracketPortion]:
    """Split ``amount`` across the brackets it reaches.

    Zero-rate brackets are reported like any other, so the rows always add up
    to the taxable income above the first threshold.
    """

    portions: list[BracketPortion] = []

    for current, following in zip(brackets, brackets[1:]):
        if amount <= current.threshold:
            break
        in_bracket = min(amount, following.threshold) - current.threshold
        if in_bracket > 0:
            last_dollar = following.threshold - 1
            portions.append(
                BracketPortion(
                    label=f"{format_currency(current.threshold)} - {format_currency(last_dollar)}",
                    amount_in_bracket=in_bracket,
                    tax_on_bracket=in_bracket * current.rate,
                    rate=current.rate,
                )
            )

    top = brackets[-1]
    if amount > top.threshold:
        in_bracket = amount - top.threshold
        portions.append(
            BracketPortion(
                label=f"Over {format_currency(top.threshold)}",
                amount_in_bracket=in_bracket,
                tax_on_bracket=in_bracket * top.rate,
                rate=top.rate,
            )
        )

    return portions


__all__ = [
    "BracketPortion",
    "calculate_bracket_breakdown",
    "calculate_income_tax",
    "marginal_rate",
]
