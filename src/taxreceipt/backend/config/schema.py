"""Pydantic models describing the fiscal year rule-set schema."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    computed_field,
    field_validator,
    model_validator,
)
from typing_extensions import Self


class ConfigurationError(ValueError):
    """Raised when configuration values violate schema expectations."""


class ImmutableModel(BaseModel):
    """Base class that freezes instances and rejects unknown fields."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


def _validate_rate(value: float, label: str) -> None:
    if value < 0 or value > 1:
        raise ConfigurationError(f"{label} must be between 0 and 1")


class TaxBracket(ImmutableModel):
    """A progressive bracket starting at ``threshold``.

    ``base`` is the cumulative tax owed on all income below the threshold, so
    the tax for any income inside the bracket is
    ``base + (income - threshold) * rate``.
    """

    threshold: float
    rate: float
    base: float = 0.0

    @model_validator(mode="after")
    def _validate_values(self) -> TaxBracket:
        if self.threshold < 0:
            raise ConfigurationError("Bracket thresholds must be non-negative")
        if self.base < 0:
            raise ConfigurationError("Bracket base amounts must be non-negative")
        _validate_rate(self.rate, "Bracket rates")
        return self


class PhaseInBand(ImmutableModel):
    """Income band over which the flat levy is phased in linearly."""

    lower: float
    upper: float

    @model_validator(mode="after")
    def _validate_band(self) -> PhaseInBand:
        if self.lower < 0:
            raise ConfigurationError("Phase-in bounds must be non-negative")
        if self.upper <= self.lower:
            raise ConfigurationError("Phase-in upper bound must exceed the lower bound")
        return self


class LevyConfig(ImmutableModel):
    """Flat-rate levy applied to taxable income above the phase-in band."""

    rate: float
    phase_in: PhaseInBand

    @model_validator(mode="after")
    def _validate_rate(self) -> LevyConfig:
        _validate_rate(self.rate, "Levy rate")
        return self


class SurchargeConfig(ImmutableModel):
    """Means-tested surcharge thresholds and tiered rates.

    ``tiers`` lists the rate for each band above the household threshold. Every
    tier but the last spans ``band_width`` currency units; the final tier is
    open-ended.
    """

    single_threshold: float
    family_threshold: float
    per_dependant_increment: float = 0.0
    band_width: float = 1_000.0
    tiers: Sequence[float]

    @field_validator("tiers", mode="before")
    @classmethod
    def _coerce_tiers(cls, value: Any) -> Sequence[float]:
        if isinstance(value, Sequence) and not isinstance(value, str):
            return tuple(float(entry) for entry in value)
        raise ConfigurationError("Surcharge tiers must be provided as a list of rates")

    @model_validator(mode="after")
    def _validate_tiers(self) -> SurchargeConfig:
        if not self.tiers:
            raise ConfigurationError("Surcharge configuration requires at least one tier")
        for rate in self.tiers:
            _validate_rate(rate, "Surcharge tier rates")
        if list(self.tiers) != sorted(self.tiers):
            raise ConfigurationError("Surcharge tier rates must be in ascending order")
        if self.single_threshold < 0 or self.family_threshold < 0:
            raise ConfigurationError("Surcharge thresholds must be non-negative")
        if self.per_dependant_increment < 0:
            raise ConfigurationError("Surcharge dependant increments must be non-negative")
        if self.band_width <= 0:
            raise ConfigurationError("Surcharge band width must be positive")
        return self

    def threshold_for(self, *, is_family: bool, dependants: int) -> float:
        if not is_family:
            return self.single_threshold
        return self.family_threshold + max(dependants, 0) * self.per_dependant_increment

    def rate_for(self, income: float, threshold: float) -> float:
        """Return the tier rate for ``income`` above ``threshold``."""

        if income <= threshold:
            return 0.0
        for index, rate in enumerate(self.tiers[:-1]):
            if income <= threshold + (index + 1) * self.band_width:
                return rate
        return self.tiers[-1]


class RepaymentThreshold(ImmutableModel):
    """Income-contingent repayment rate applying from ``threshold`` upwards."""

    threshold: float
    rate: float

    @model_validator(mode="after")
    def _validate_values(self) -> RepaymentThreshold:
        if self.threshold < 0:
            raise ConfigurationError("Repayment thresholds must be non-negative")
        _validate_rate(self.rate, "Repayment rates")
        return self


class TaperSegment(ImmutableModel):
    """Linear change of an offset between ``start`` and ``end`` income.

    ``rate`` is signed: negative rates taper the offset away, positive rates
    build it up.
    """

    start: float
    end: float
    starting_amount: float
    rate: float

    @model_validator(mode="after")
    def _validate_segment(self) -> TaperSegment:
        if self.end <= self.start:
            raise ConfigurationError("Offset taper segments must have end > start")
        if self.starting_amount < 0:
            raise ConfigurationError("Offset taper amounts must be non-negative")
        return self

    def amount_at(self, income: float) -> float:
        amount = self.starting_amount + (income - self.start) * self.rate
        return amount if amount > 0 else 0.0


class OffsetSchedule(ImmutableModel):
    """Offset paid in full up to ``full_amount_until`` and then tapered.

    Income above the final segment receives no offset.
    """

    full_amount: float
    full_amount_until: float
    segments: Sequence[TaperSegment] = Field(default_factory=tuple)

    @model_validator(mode="after")
    def _validate_schedule(self) -> OffsetSchedule:
        if self.full_amount < 0:
            raise ConfigurationError("Offset amounts must be non-negative")
        previous_end = self.full_amount_until
        for segment in self.segments:
            if segment.start < previous_end:
                raise ConfigurationError("Offset taper segments must not overlap")
            previous_end = segment.end
        return self


class OffsetConfig(ImmutableModel):
    """Non-refundable offsets defined by the rule-set."""

    low_income: OffsetSchedule | None = None
    low_middle_income: OffsetSchedule | None = None


class YearConfiguration(ImmutableModel):
    """Structured representation of a fiscal year rule-set."""

    year: int
    meta: Mapping[str, Any] = Field(default_factory=dict)
    brackets: Sequence[TaxBracket]
    levy: LevyConfig
    surcharge: SurchargeConfig
    repayment: Sequence[RepaymentThreshold]
    offsets: OffsetConfig = Field(default_factory=OffsetConfig)

    @model_validator(mode="before")
    @classmethod
    def _prepare_sections(cls, data: Any) -> Mapping[str, Any]:
        if not isinstance(data, Mapping):
            raise ConfigurationError("Configuration file must define a mapping at the top level")

        prepared = dict(data)
        meta = prepared.get("meta")
        if meta is None:
            prepared["meta"] = {}
        elif not isinstance(meta, Mapping):
            raise ConfigurationError("'meta' section must be a mapping if provided")

        for section in ("brackets", "levy", "surcharge", "repayment"):
            if prepared.get(section) is None:
                raise ConfigurationError(f"Configuration requires a '{section}' section")

        if prepared.get("offsets") is None:
            prepared["offsets"] = {}

        return prepared

    @model_validator(mode="after")
    def _validate_year(self) -> Self:
        self._validate_bracket_sequence(self.brackets)
        self._validate_repayment_sequence(self.repayment)
        return self

    @staticmethod
    def _validate_bracket_sequence(brackets: Sequence[TaxBracket]) -> None:
        if not brackets:
            raise ConfigurationError("At least one tax bracket must be defined")
        previous: TaxBracket | None = None
        for bracket in brackets:
            if previous is not None:
                if bracket.threshold <= previous.threshold:
                    raise ConfigurationError("Tax brackets must be in ascending order")
                if bracket.base < previous.base:
                    raise ConfigurationError("Bracket base amounts must not decrease")
            previous = bracket

    @staticmethod
    def _validate_repayment_sequence(table: Sequence[RepaymentThreshold]) -> None:
        if not table:
            raise ConfigurationError("At least one repayment threshold must be defined")
        previous: float | None = None
        for entry in table:
            if previous is not None and entry.threshold <= previous:
                raise ConfigurationError("Repayment thresholds must be in ascending order")
            previous = entry.threshold

    @property
    def floor(self) -> float:
        """Income below which no progressive tax applies."""

        for bracket in self.brackets:
            if bracket.rate > 0:
                return bracket.threshold
        return self.brackets[-1].threshold


class TaxYearManifestEntry(ImmutableModel):
    """Entry describing a supported fiscal year in the manifest."""

    year: int
    filename: str | None = None
    status: str = "active"
    notes_url: str | None = None

    @computed_field
    @property
    def resolved_filename(self) -> str:
        return self.filename or f"{self.year}.yaml"


class TaxYearManifest(ImmutableModel):
    """Manifest describing the available rule-set files."""

    years: Sequence[TaxYearManifestEntry]

    @model_validator(mode="after")
    def _validate_years(self) -> TaxYearManifest:
        if not self.years:
            raise ConfigurationError("The configuration manifest must declare at least one year")
        seen: set[int] = set()
        for entry in self.years:
            if entry.year in seen:
                raise ConfigurationError(
                    f"Duplicate year {entry.year} declared in the configuration manifest"
                )
            seen.add(entry.year)
        return self

    def get_entry(self, year: int) -> TaxYearManifestEntry:
        for entry in self.years:
            if entry.year == year:
                return entry
        raise KeyError(year)

    @computed_field
    @property
    def supported_years(self) -> tuple[int, ...]:
        return tuple(sorted(entry.year for entry in self.years))


__all__ = [
    "ConfigurationError",
    "ImmutableModel",
    "LevyConfig",
    "OffsetConfig",
    "OffsetSchedule",
    "PhaseInBand",
    "RepaymentThreshold",
    "SurchargeConfig",
    "TaperSegment",
    "TaxBracket",
    "TaxYearManifest",
    "TaxYearManifestEntry",
    "ValidationError",
    "YearConfiguration",
]
