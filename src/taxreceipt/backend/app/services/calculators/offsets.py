"""Non-refundable tax offsets defined by the rule-set."""

from __future__ import annotations

from taxreceipt.backend.config.year_config import OffsetSchedule, YearConfiguration


def calculate_offset(amount: float, schedule: OffsetSchedule | None) -> float:
    """Evaluate ``schedule`` for a taxable income of ``amount``."""

    if schedule is None:
        return 0.0
    if amount <= schedule.full_amount_until:
        return schedule.full_amount
    for segment in schedule.segments:
        if amount <= segment.end:
            return segment.amount_at(amount)
    return 0.0


def calculate_low_income_offset(amount: float, config: YearConfiguration) -> float:
    return calculate_offset(amount, config.offsets.low_income)


def calculate_low_middle_income_offset(amount: float, config: YearConfiguration) -> float:
    return calculate_offset(amount, config.offsets.low_middle_income)


__all__ = [
    "calculate_low_income_offset",
    "calculate_low_middle_income_offset",
    "calculate_offset",
]
