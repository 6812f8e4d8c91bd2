"""Typed inputs and derived results shared across the calculation services.

Inputs arriving from outside (request payloads, stored returns) are Pydantic
models; values the engines derive are lightweight frozen dataclasses that the
HTTP layer serialises with ``as_dict``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any

from .api import (
    CalculationRequest,
    PageClassificationInput,
    PageSelectionRequest,
    SummaryRequest,
    format_validation_error,
)
from .pages import PageCategory, PageClassification, PageSelection, PageTier
from .records import (
    AustralianReturn,
    LabeledAmount,
    LegacyReturn,
    LevyRates,
    LineItems,
    Location,
    PrimaryRates,
    RateBlock,
    TaxSection,
    YearRecord,
    load_year_record,
    load_year_records,
)

__all__ = [
    "AggregatedSummary",
    "AustralianReturn",
    "AveragedRates",
    "CalculationRequest",
    "InputContractError",
    "LabeledAmount",
    "LegacyReturn",
    "LevyRates",
    "LiabilityContext",
    "LineItems",
    "Location",
    "LocationYears",
    "PageCategory",
    "PageClassification",
    "PageClassificationInput",
    "PageSelection",
    "PageSelectionRequest",
    "PageTier",
    "PrimaryRates",
    "RateBlock",
    "SummaryRequest",
    "TaxLiability",
    "TaxSection",
    "YearRecord",
    "format_validation_error",
    "load_year_record",
    "load_year_records",
]


class InputContractError(ValueError):
    """Raised when a caller passes values the engines must not clamp."""


@dataclass(frozen=True, slots=True)
class LiabilityContext:
    """Household facts that influence the surcharge and loan repayments."""

    has_qualifying_cover: bool = False
    outstanding_loan_balance: float | None = None
    is_family: bool = False
    dependants: int = 0


@dataclass(frozen=True, slots=True)
class TaxLiability:
    """Liability breakdown before any return-specific offsets."""

    taxable_income: float
    gross_tax: float
    levy_amount: float
    surcharge_amount: float
    repayment_amount: float
    total_before_offsets: float
    marginal_rate: float
    effective_rate: float | None

    @property
    def tax_payable(self) -> float:
        return self.total_before_offsets

    def as_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["tax_payable"] = self.tax_payable
        return payload


@dataclass(frozen=True, slots=True)
class LocationYears:
    state: str
    years: tuple[int, ...]


@dataclass(frozen=True, slots=True)
class AveragedRates:
    """Mean reported rates; the levy figures average over their own year count."""

    marginal: float
    effective: float
    levy_rate: float | None = None
    levy_amount: float | None = None


@dataclass(frozen=True, slots=True)
class AggregatedSummary:
    """Multi-year rollup derived from the current set of year records."""

    years: tuple[int, ...]
    year_count: int
    income_items: tuple[LabeledAmount, ...]
    total_income: float
    avg_taxable_income: float
    deductions: tuple[LabeledAmount, ...]
    total_deductions: float
    total_gross_tax: float
    total_levy: float
    total_surcharge: float
    total_repayment: float
    total_offsets: float
    total_tax_payable: float
    total_withheld: float
    total_refund: float
    total_owing: float
    net_position: float
    rates: AveragedRates | None
    gross_monthly: float
    net_monthly: float
    hourly_rate: float
    take_home: Mapping[str, float]
    locations: tuple[LocationYears, ...]

    @property
    def year_range(self) -> str:
        if len(self.years) > 1:
            return f"{self.years[0]}-{self.years[-1]}"
        return str(self.years[0])

    def as_dict(self) -> dict[str, Any]:
        return {
            "years": list(self.years),
            "year_count": self.year_count,
            "year_range": self.year_range,
            "income_items": [item.model_dump() for item in self.income_items],
            "total_income": self.total_income,
            "avg_taxable_income": self.avg_taxable_income,
            "deductions": [item.model_dump() for item in self.deductions],
            "total_deductions": self.total_deductions,
            "total_gross_tax": self.total_gross_tax,
            "total_levy": self.total_levy,
            "total_surcharge": self.total_surcharge,
            "total_repayment": self.total_repayment,
            "total_offsets": self.total_offsets,
            "total_tax_payable": self.total_tax_payable,
            "total_withheld": self.total_withheld,
            "total_refund": self.total_refund,
            "total_owing": self.total_owing,
            "net_position": self.net_position,
            "rates": asdict(self.rates) if self.rates is not None else None,
            "gross_monthly": self.gross_monthly,
            "net_monthly": self.net_monthly,
            "hourly_rate": self.hourly_rate,
            "take_home": dict(self.take_home),
            "locations": [
                {"state": entry.state, "years": list(entry.years)}
                for entry in self.locations
            ],
        }
