"""Merge per-year return records into a single multi-year summary.

The summary is derived on demand from whatever records currently exist and is
never stored. Line items are merged by label across years, so a label that
only appears in some years still contributes its amounts. Refund and owing
totals are built from each year's reported signed result rather than from the
liability and withholding totals, because the reported result can include
adjustments that appear nowhere else on the return.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from types import MappingProxyType

from taxreceipt.backend.app.models import (
    AggregatedSummary,
    AveragedRates,
    LabeledAmount,
    LocationYears,
    YearRecord,
)

_LOGGER = logging.getLogger(__name__)

# 40 hours a week for 52 weeks.
HOURS_PER_YEAR = 2080
HOURS_PER_WORKING_DAY = 8

TIME_UNIT_FACTORS: Mapping[str, float] = MappingProxyType(
    {
        "daily": HOURS_PER_WORKING_DAY,
        "hourly": 1.0,
        "minute": 1 / 60,
        "second": 1 / 3600,
    }
)


def total_tax(record: YearRecord) -> float:
    return record.tax.tax_payable


def net_income(record: YearRecord) -> float:
    return record.income.total - record.tax.tax_payable


def effective_rate(record: YearRecord) -> float | None:
    """Return the record's effective rate as a ratio.

    A reported rate block wins over the derived figure. Reported rates are
    percentages.
    """

    if record.rates is not None and record.rates.primary.effective:
        return record.rates.primary.effective / 100
    if record.income.total == 0:
        return None
    return record.tax.tax_payable / record.income.total


def convert_hourly_rate(hourly_rate: float, unit: str) -> float:
    """Express an hourly take-home figure in another time unit."""

    try:
        factor = TIME_UNIT_FACTORS[unit]
    except KeyError as exc:
        raise ValueError(f"Unknown time unit '{unit}'") from exc
    return hourly_rate * factor


def _merge_items(groups: Iterable[Sequence[LabeledAmount]]) -> tuple[LabeledAmount, ...]:
    merged: dict[str, float] = {}
    for items in groups:
        for item in items:
            merged[item.label] = merged.get(item.label, 0.0) + item.amount
    return tuple(LabeledAmount(label=label, amount=amount) for label, amount in merged.items())


def _average_rates(records: Sequence[YearRecord]) -> AveragedRates | None:
    with_rates = [record.rates for record in records if record.rates is not None]
    if not with_rates:
        return None

    marginal = sum(rates.primary.marginal for rates in with_rates) / len(with_rates)
    effective = sum(rates.primary.effective for rates in with_rates) / len(with_rates)

    levy_blocks = [rates.levy for rates in with_rates if rates.levy is not None]
    levy_rate: float | None = None
    levy_amount: float | None = None
    if levy_blocks:
        levy_rate = sum(block.rate for block in levy_blocks) / len(levy_blocks)
        levy_amount = sum(block.amount for block in levy_blocks) / len(levy_blocks)

    return AveragedRates(
        marginal=marginal,
        effective=effective,
        levy_rate=levy_rate,
        levy_amount=levy_amount,
    )


def _collect_locations(records: Sequence[YearRecord]) -> tuple[LocationYears, ...]:
    by_state: dict[str, set[int]] = {}
    for record in records:
        if record.location is None:
            continue
        by_state.setdefault(record.location.state, set()).add(record.year)
    return tuple(
        LocationYears(state=state, years=tuple(sorted(years)))
        for state, years in sorted(by_state.items())
    )


def aggregate_summary(records: Mapping[int, YearRecord]) -> AggregatedSummary | None:
    """Return the multi-year summary for ``records``, or ``None`` when empty."""

    years = tuple(sorted(records))
    ordered = [records[year] for year in years]
    if not ordered:
        return None

    count = len(ordered)

    income_items = _merge_items(record.income.items for record in ordered)
    deductions = _merge_items(record.deductions.items for record in ordered)

    total_income = sum(record.income.total for record in ordered)
    total_deductions = sum(record.deductions.total for record in ordered)
    total_gross_tax = sum(record.tax.gross_tax for record in ordered)
    total_levy = sum(record.tax.levy for record in ordered)
    total_surcharge = sum(record.tax.surcharge or 0.0 for record in ordered)
    total_repayment = sum(record.tax.repayment or 0.0 for record in ordered)
    total_offsets = sum(record.tax.total_offsets for record in ordered)
    total_tax_payable = sum(record.tax.tax_payable for record in ordered)
    total_withheld = sum(record.withholding.total for record in ordered)

    total_refund = 0.0
    total_owing = 0.0
    for record in ordered:
        if record.result > 0:
            total_refund += record.result
        else:
            total_owing += record.result

    avg_taxable_income = sum(record.taxable_income for record in ordered) / count

    take_home_total = total_income - total_tax_payable
    gross_monthly = total_income / 12 / count
    net_monthly = take_home_total / 12 / count
    hourly_rate = take_home_total / count / HOURS_PER_YEAR

    _LOGGER.debug("Aggregated %d year(s): %s", count, years)

    return AggregatedSummary(
        years=years,
        year_count=count,
        income_items=income_items,
        total_income=total_income,
        avg_taxable_income=avg_taxable_income,
        deductions=deductions,
        total_deductions=total_deductions,
        total_gross_tax=total_gross_tax,
        total_levy=total_levy,
        total_surcharge=total_surcharge,
        total_repayment=total_repayment,
        total_offsets=total_offsets,
        total_tax_payable=total_tax_payable,
        total_withheld=total_withheld,
        total_refund=total_refund,
        total_owing=total_owing,
        net_position=total_refund + total_owing,
        rates=_average_rates(ordered),
        gross_monthly=gross_monthly,
        net_monthly=net_monthly,
        hourly_rate=hourly_rate,
        take_home=MappingProxyType(
            {unit: convert_hourly_rate(hourly_rate, unit) for unit in TIME_UNIT_FACTORS}
        ),
        locations=_collect_locations(ordered),
    )


__all__ = [
    "HOURS_PER_YEAR",
    "TIME_UNIT_FACTORS",
    "aggregate_summary",
    "convert_hourly_rate",
    "effective_rate",
    "net_income",
    "total_tax",
]
