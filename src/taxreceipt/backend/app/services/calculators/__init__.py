"""Domain-specific calculation helpers."""

from .levies import calculate_levy, calculate_repayment, calculate_surcharge
from .offsets import (
    calculate_low_income_offset,
    calculate_low_middle_income_offset,
    calculate_offset,
)
from .progressive import (
    BracketPortion,
    calculate_bracket_breakdown,
    calculate_income_tax,
    marginal_rate,
)
from .utils import format_currency, format_percentage, round_currency, round_rate

__all__ = [
    "BracketPortion",
    "calculate_bracket_breakdown",
    "calculate_income_tax",
    "calculate_levy",
    "calculate_low_income_offset",
    "calculate_low_middle_income_offset",
    "calculate_offset",
    "calculate_repayment",
    "calculate_surcharge",
    "format_currency",
    "format_percentage",
    "marginal_rate",
    "round_currency",
    "round_rate",
]
