"""Orchestrate request validation, rule-set resolution and liability output.

The calculation service turns a raw request mapping into a validated
``CalculationRequest``, resolves the rule-set governing the requested year and
combines the liability engine with the rule-set's offsets into a JSON-ready
payload. Profiling hooks live here so the calculators stay pure arithmetic.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from contextlib import contextmanager
from time import perf_counter
from typing import Any

from pydantic import ValidationError

from taxreceipt.backend.app.models import (
    CalculationRequest,
    LiabilityContext,
    format_validation_error,
)
from taxreceipt.backend.config.year_config import YearConfiguration, resolve_rule_set

from .calculators import (
    calculate_bracket_breakdown,
    calculate_low_income_offset,
    calculate_low_middle_income_offset,
    format_percentage,
    round_currency,
    round_rate,
)
from .liability_service import compute_liability

_LOGGER = logging.getLogger(__name__)


def _profiling_enabled() -> bool:
    """Return ``True`` when calculation profiling should be captured."""

    flag = os.getenv("TAXRECEIPT_PROFILE_CALCULATIONS", "")
    return flag.strip().lower() in {"1", "true", "yes", "on"}


@contextmanager
def _profile_section(name: str, store: dict[str, float] | None):
    """Capture the duration of a named section when profiling is enabled."""

    if store is None:
        yield
        return

    start = perf_counter()
    try:
        yield
    finally:
        store[name] = perf_counter() - start


def _validate_request(payload: Mapping[str, Any] | CalculationRequest) -> CalculationRequest:
    if isinstance(payload, CalculationRequest):
        return payload
    if not isinstance(payload, Mapping):
        raise ValueError("Payload must be a mapping")
    if "year" not in payload:
        raise ValueError("Payload must include a tax year")
    try:
        return CalculationRequest.model_validate(payload)
    except ValidationError as exc:
        raise ValueError(format_validation_error(exc, subject="calculation payload")) from exc


def _calculate_offsets(amount: float, config: YearConfiguration) -> list[dict[str, Any]]:
    offsets: list[dict[str, Any]] = []

    if config.offsets.low_income is not None:
        offsets.append(
            {
                "type": "low_income",
                "label": "Low income tax offset",
                "amount": calculate_low_income_offset(amount, config),
            }
        )
    if config.offsets.low_middle_income is not None:
        offsets.append(
            {
                "type": "low_middle_income",
                "label": "Low and middle income tax offset",
                "amount": calculate_low_middle_income_offset(amount, config),
            }
        )

    return [entry for entry in offsets if entry["amount"] > 0]


def calculate_tax(payload: Mapping[str, Any] | CalculationRequest) -> dict[str, Any]:
    """Compute the liability summary for the provided payload."""

    request_model = _validate_request(payload)

    timings: dict[str, float] | None = {} if _profiling_enabled() else None
    overall_start = perf_counter() if timings is not None else None

    config = resolve_rule_set(request_model.year)
    household = request_model.household
    context = LiabilityContext(
        has_qualifying_cover=household.has_qualifying_cover,
        outstanding_loan_balance=household.outstanding_loan_balance,
        is_family=household.is_family,
        dependants=household.dependants,
    )
    income = request_model.taxable_income

    with _profile_section("liability", timings):
        liability = compute_liability(income, config, context)

    offsets: list[dict[str, Any]] = []
    if request_model.include_offsets:
        with _profile_section("offsets", timings):
            offsets = _calculate_offsets(income, config)

    # Offsets are non-refundable and only reduce income tax.
    offsets_requested = sum(entry["amount"] for entry in offsets)
    offsets_applied = min(offsets_requested, liability.gross_tax)
    tax_payable = liability.total_before_offsets - offsets_applied

    breakdown: list[dict[str, Any]] = []
    if request_model.include_breakdown:
        with _profile_section("breakdown", timings):
            portions = calculate_bracket_breakdown(income, config.brackets)
        breakdown = [
            {
                "label": portion.label,
                "amount_in_bracket": round_currency(portion.amount_in_bracket),
                "tax_on_bracket": round_currency(portion.tax_on_bracket),
                "rate": round_rate(portion.rate),
                "rate_label": format_percentage(portion.rate),
            }
            for portion in portions
        ]

    if timings is not None and overall_start is not None:
        timings["total"] = perf_counter() - overall_start
        _LOGGER.debug(
            "calculate_tax timings (ms): %s",
            {name: round(duration * 1000, 3) for name, duration in timings.items()},
        )

    effective_rate = tax_payable / income if income > 0 else None

    summary: dict[str, Any] = {
        "taxable_income": round_currency(income),
        "gross_tax": round_currency(liability.gross_tax),
        "levy": round_currency(liability.levy_amount),
        "surcharge": round_currency(liability.surcharge_amount),
        "repayment": round_currency(liability.repayment_amount),
        "total_before_offsets": round_currency(liability.total_before_offsets),
        "offsets_applied": round_currency(offsets_applied),
        "tax_payable": round_currency(tax_payable),
        "marginal_rate": round_rate(liability.marginal_rate),
        "effective_rate": round_rate(effective_rate) if effective_rate is not None else None,
    }

    meta: dict[str, Any] = {
        "requested_year": request_model.year,
        "applied_year": config.year,
    }
    label = config.meta.get("label")
    if isinstance(label, str):
        meta["rule_set_label"] = label

    return {
        "summary": summary,
        "offsets": [
            {**entry, "amount": round_currency(entry["amount"])} for entry in offsets
        ],
        "breakdown": breakdown,
        "meta": meta,
    }


__all__ = ["calculate_tax"]
