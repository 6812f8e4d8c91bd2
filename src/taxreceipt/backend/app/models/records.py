"""Canonical per-year return records and the formats they are loaded from.

Two historical extraction formats exist in stored data: the current return
layout (levy, surcharge and withholding sections) and an earlier layout that
split the return into a federal section and per-state sections. Both are
parsed as separate Pydantic models and converted once into :class:`YearRecord`
so the aggregation code only ever sees one shape.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Annotated, Any, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    TypeAdapter,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel


class RecordModel(BaseModel):
    """Frozen base model accepting both snake_case and camelCase keys."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )


class LabeledAmount(RecordModel):
    label: str
    amount: float


def _ensure_unique_labels(items: tuple[LabeledAmount, ...]) -> tuple[LabeledAmount, ...]:
    seen: set[str] = set()
    for item in items:
        if item.label in seen:
            raise ValueError(f"Duplicate line item label '{item.label}'")
        seen.add(item.label)
    return items


class LineItems(RecordModel):
    """Labelled amounts with the total reported alongside them."""

    items: tuple[LabeledAmount, ...] = ()
    total: float = 0.0

    @field_validator("items")
    @classmethod
    def _unique_labels(cls, value: tuple[LabeledAmount, ...]) -> tuple[LabeledAmount, ...]:
        return _ensure_unique_labels(value)

    @classmethod
    def from_items(cls, items: Iterable[LabeledAmount]) -> LineItems:
        entries = tuple(items)
        return cls(items=entries, total=sum(item.amount for item in entries))


class Location(RecordModel):
    state: str
    postcode: str | None = None
    suburb: str | None = None


class TaxSection(RecordModel):
    """Liability figures as reported on the return."""

    gross_tax: float
    levy: float = 0.0
    surcharge: float | None = None
    repayment: float | None = None
    total_before_offsets: float
    offsets: tuple[LabeledAmount, ...] = ()
    total_offsets: float = 0.0
    tax_payable: float

    @field_validator("offsets")
    @classmethod
    def _unique_labels(cls, value: tuple[LabeledAmount, ...]) -> tuple[LabeledAmount, ...]:
        return _ensure_unique_labels(value)


class PrimaryRates(RecordModel):
    marginal: float
    effective: float


class LevyRates(RecordModel):
    rate: float
    amount: float


class RateBlock(RecordModel):
    """Reported rates, expressed as percentages."""

    primary: PrimaryRates
    levy: LevyRates | None = None


class YearRecord(RecordModel):
    """One fiscal year's fully extracted return in canonical form.

    ``result`` is signed: positive amounts are refunds, everything else is
    owed.
    """

    year: int
    name: str = ""
    location: Location | None = None
    income: LineItems
    deductions: LineItems = Field(default_factory=LineItems)
    taxable_income: float
    tax: TaxSection
    withholding: LineItems = Field(default_factory=LineItems)
    result: float
    rates: RateBlock | None = None

    @property
    def is_refund(self) -> bool:
        return self.result > 0


class _AustralianTax(RecordModel):
    gross_tax: float
    medicare_levy: float = 0.0
    medicare_levy_surcharge: float | None = None
    help_repayment: float | None = None
    total_tax_before_offsets: float
    offsets: tuple[LabeledAmount, ...] = ()
    total_offsets: float = 0.0
    tax_payable: float


class _AustralianResult(RecordModel):
    refund_or_owing: float
    is_refund: bool | None = None


class _AustralianRates(RecordModel):
    federal: PrimaryRates
    medicare: LevyRates | None = None


class AustralianReturn(RecordModel):
    """Current extraction format."""

    year: int
    name: str = ""
    location: Location | None = None
    income: LineItems
    deductions: LineItems = Field(default_factory=LineItems)
    taxable_income: float
    tax: _AustralianTax
    payg_withholding: LineItems = Field(default_factory=LineItems)
    result: _AustralianResult
    rates: _AustralianRates | None = None

    def to_record(self) -> YearRecord:
        result = self.result.refund_or_owing
        if self.result.is_refund is False and result > 0:
            result = -result

        rates = None
        if self.rates is not None:
            rates = RateBlock(primary=self.rates.federal, levy=self.rates.medicare)

        return YearRecord(
            year=self.year,
            name=self.name,
            location=self.location,
            income=self.income,
            deductions=self.deductions,
            taxable_income=self.taxable_income,
            tax=TaxSection(
                gross_tax=self.tax.gross_tax,
                levy=self.tax.medicare_levy,
                surcharge=self.tax.medicare_levy_surcharge,
                repayment=self.tax.help_repayment,
                total_before_offsets=self.tax.total_tax_before_offsets,
                offsets=self.tax.offsets,
                total_offsets=self.tax.total_offsets,
                tax_payable=self.tax.tax_payable,
            ),
            withholding=self.payg_withholding,
            result=result,
            rates=rates,
        )


class _LegacyFederal(RecordModel):
    agi: float = 0.0
    deductions: tuple[LabeledAmount, ...] = ()
    taxable_income: float
    tax: float
    credits: tuple[LabeledAmount, ...] = ()
    payments: tuple[LabeledAmount, ...] = ()
    refund_or_owed: float = 0.0


class _LegacyState(RecordModel):
    name: str
    agi: float = 0.0
    deductions: tuple[LabeledAmount, ...] = ()
    taxable_income: float = 0.0
    tax: float = 0.0
    adjustments: tuple[LabeledAmount, ...] = ()
    payments: tuple[LabeledAmount, ...] = ()
    refund_or_owed: float = 0.0


class _LegacySummary(RecordModel):
    federal_amount: float = 0.0
    net_position: float


class _LegacyRates(RecordModel):
    federal: PrimaryRates


class LegacyReturn(RecordModel):
    """Earlier extraction format with federal and per-state sections."""

    year: int
    name: str = ""
    income: LineItems
    federal: _LegacyFederal
    states: tuple[_LegacyState, ...] = ()
    summary: _LegacySummary
    rates: _LegacyRates | None = None

    def to_record(self) -> YearRecord:
        tax_payable = self.federal.tax + sum(state.tax for state in self.states)
        total_offsets = sum(item.amount for item in self.federal.credits)
        gross_tax = tax_payable - total_offsets

        payments = list(self.federal.payments)
        for state in self.states:
            payments.extend(
                LabeledAmount(label=f"{state.name}: {item.label}", amount=item.amount)
                for item in state.payments
            )

        location = Location(state=self.states[0].name) if self.states else None
        rates = RateBlock(primary=self.rates.federal) if self.rates is not None else None

        return YearRecord(
            year=self.year,
            name=self.name,
            location=location,
            income=self.income,
            deductions=LineItems.from_items(self.federal.deductions),
            taxable_income=self.federal.taxable_income,
            tax=TaxSection(
                gross_tax=gross_tax,
                total_before_offsets=gross_tax,
                offsets=self.federal.credits,
                total_offsets=total_offsets,
                tax_payable=tax_payable,
            ),
            withholding=LineItems.from_items(payments),
            result=self.summary.net_position,
            rates=rates,
        )


def _record_variant(value: Any) -> str | None:
    if isinstance(value, Mapping):
        return "legacy" if "federal" in value else "australian"
    if isinstance(value, LegacyReturn):
        return "legacy"
    if isinstance(value, AustralianReturn):
        return "australian"
    return None


StoredReturn = Annotated[
    Union[
        Annotated[AustralianReturn, Tag("australian")],
        Annotated[LegacyReturn, Tag("legacy")],
    ],
    Discriminator(_record_variant),
]

_STORED_RETURN_ADAPTER: TypeAdapter[AustralianReturn | LegacyReturn] = TypeAdapter(StoredReturn)


def load_year_record(payload: Mapping[str, Any] | YearRecord) -> YearRecord:
    """Resolve a stored return in either format into a :class:`YearRecord`."""

    if isinstance(payload, YearRecord):
        return payload
    if not isinstance(payload, Mapping):
        raise ValueError("Return payload must be a mapping")
    stored = _STORED_RETURN_ADAPTER.validate_python(payload)
    return stored.to_record()


def load_year_records(payloads: Mapping[Any, Any]) -> dict[int, YearRecord]:
    """Load a ``{year: payload}`` mapping, keyed by each record's own year.

    Mapping keys may be strings (as in JSON objects); the record's ``year``
    field must agree with its key.
    """

    records: dict[int, YearRecord] = {}
    for key, payload in payloads.items():
        try:
            year = int(key)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid year key '{key}'") from exc
        record = load_year_record(payload)
        if record.year != year:
            raise ValueError(f"Return keyed by {year} reports year {record.year}")
        records[year] = record
    return records


__all__ = [
    "AustralianReturn",
    "LabeledAmount",
    "LegacyReturn",
    "LevyRates",
    "LineItems",
    "Location",
    "PrimaryRates",
    "RateBlock",
    "StoredReturn",
    "TaxSection",
    "ValidationError",
    "YearRecord",
    "load_year_record",
    "load_year_records",
]
