"""Compute a tax liability from taxable income and a fiscal year rule-set."""

from __future__ import annotations

import logging

from taxreceipt.backend.app.models import InputContractError, LiabilityContext, TaxLiability
from taxreceipt.backend.config.year_config import YearConfiguration

from .calculators import (
    calculate_income_tax,
    calculate_levy,
    calculate_repayment,
    calculate_surcharge,
    marginal_rate,
)

_LOGGER = logging.getLogger(__name__)

_DEFAULT_CONTEXT = LiabilityContext()


def compute_liability(
    taxable_income: float,
    rule_set: YearConfiguration,
    context: LiabilityContext | None = None,
) -> TaxLiability:
    """Return the liability owed on ``taxable_income`` under ``rule_set``.

    Offsets are return-specific and are left to the caller, so the payable
    amount equals the total before offsets.
    """

    if taxable_income < 0:
        raise InputContractError("Taxable income cannot be negative")

    context = context or _DEFAULT_CONTEXT

    gross_tax = calculate_income_tax(taxable_income, rule_set.brackets)
    levy_amount = calculate_levy(taxable_income, rule_set.levy)
    surcharge_amount = calculate_surcharge(
        taxable_income,
        rule_set.surcharge,
        has_qualifying_cover=context.has_qualifying_cover,
        is_family=context.is_family,
        dependants=context.dependants,
    )
    repayment_amount = calculate_repayment(
        taxable_income, rule_set.repayment, context.outstanding_loan_balance
    )

    total = gross_tax + levy_amount + surcharge_amount + repayment_amount
    effective_rate = total / taxable_income if taxable_income > 0 else None

    _LOGGER.debug(
        "Liability for %s under %s: gross=%.2f levy=%.2f surcharge=%.2f repayment=%.2f",
        taxable_income,
        rule_set.year,
        gross_tax,
        levy_amount,
        surcharge_amount,
        repayment_amount,
    )

    return TaxLiability(
        taxable_income=taxable_income,
        gross_tax=gross_tax,
        levy_amount=levy_amount,
        surcharge_amount=surcharge_amount,
        repayment_amount=repayment_amount,
        total_before_offsets=total,
        marginal_rate=marginal_rate(taxable_income, rule_set.brackets),
        effective_rate=effective_rate,
    )


__all__ = ["compute_liability"]
