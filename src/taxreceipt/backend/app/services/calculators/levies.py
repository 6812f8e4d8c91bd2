"""Flat levy, means-tested surcharge and contingent repayment calculators."""

from __future__ import annotations

from collections.abc import Sequence

from taxreceipt.backend.config.year_config import (
    LevyConfig,
    RepaymentThreshold,
    SurchargeConfig,
)

from .utils import find_applicable


def calculate_levy(amount: float, levy: LevyConfig) -> float:
    """Return the flat levy on ``amount`` including the low-income phase-in.

    Inside the phase-in band the levy grows linearly from zero at the lower
    bound to the full rate at the upper bound.
    """

    lower = levy.phase_in.lower
    upper = levy.phase_in.upper

    if amount <= lower:
        return 0.0
    full_levy = amount * levy.rate
    if amount >= upper:
        return full_levy
    return full_levy * (1 - (upper - amount) / (upper - lower))


def calculate_surcharge(
    amount: float,
    surcharge: SurchargeConfig,
    *,
    has_qualifying_cover: bool,
    is_family: bool = False,
    dependants: int = 0,
) -> float:
    """Return the surcharge owed when no qualifying cover is held."""

    if has_qualifying_cover:
        return 0.0

    threshold = surcharge.threshold_for(is_family=is_family, dependants=dependants)
    return amount * surcharge.rate_for(amount, threshold)


def calculate_repayment(
    amount: float,
    table: Sequence[RepaymentThreshold],
    outstanding_balance: float | None,
) -> float:
    """Return the compulsory repayment, never more than ``outstanding_balance``."""

    if not outstanding_balance or outstanding_balance <= 0:
        return 0.0

    entry = find_applicable(table, amount, lambda item: item.threshold)
    if entry is None:
        return 0.0
    return min(amount * entry.rate, outstanding_balance)


__all__ = ["calculate_levy", "calculate_repayment", "calculate_surcharge"]
