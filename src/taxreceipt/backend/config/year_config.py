"""Rule-set loader wrapping the shared schema models."""

from __future__ import annotations

import logging
from bisect import bisect_right
from functools import lru_cache
from pathlib import Path
from typing import Any, Sequence

import yaml
from pydantic import ValidationError

from .schema import (
    ConfigurationError,
    LevyConfig,
    OffsetConfig,
    OffsetSchedule,
    PhaseInBand,
    RepaymentThreshold,
    SurchargeConfig,
    TaperSegment,
    TaxBracket,
    TaxYearManifest,
    TaxYearManifestEntry,
    YearConfiguration,
)

CONFIG_DIRECTORY = Path(__file__).resolve().parent / "data"
MANIFEST_FILE = CONFIG_DIRECTORY / "manifest.yaml"

_LOGGER = logging.getLogger(__name__)


class RuleSetNotFoundError(LookupError):
    """Raised when no rule-set covers the requested fiscal year."""


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration file must define a mapping at the top level")
    return data


@lru_cache(maxsize=1)
def load_manifest() -> TaxYearManifest:
    """Load and cache the configuration manifest."""

    if not MANIFEST_FILE.exists():
        raise FileNotFoundError("Configuration manifest not found")

    raw_manifest = _load_yaml(MANIFEST_FILE)

    try:
        return TaxYearManifest.model_validate(raw_manifest)
    except ValidationError as error:
        raise ConfigurationError(f"Manifest validation failed: {error}") from error


@lru_cache(maxsize=8)
def load_year_configuration(year: int) -> YearConfiguration:
    """Load the rule-set declared for exactly ``year`` from disk."""

    try:
        manifest_entry = load_manifest().get_entry(year)
    except KeyError as exc:
        raise FileNotFoundError(f"Configuration for year {year} not declared in manifest") from exc

    config_file = CONFIG_DIRECTORY / manifest_entry.resolved_filename
    if not config_file.exists():
        raise FileNotFoundError(
            f"Configuration file for year {year} missing: {config_file.name}"
        )

    raw_config = _load_yaml(config_file)
    raw_config.setdefault("year", year)

    try:
        configuration = YearConfiguration.model_validate(raw_config)
    except ValidationError as error:
        raise ConfigurationError(f"Configuration validation failed for {year}: {error}") from error

    if configuration.year != year:
        raise ConfigurationError(
            f"Configuration year mismatch: expected {year}, found {configuration.year}"
        )

    return configuration


def available_years() -> Sequence[int]:
    """Return the fiscal years declared in the manifest."""

    return load_manifest().supported_years


def resolve_rule_year(year: int) -> int:
    """Return the declared year whose rule-set governs ``year``.

    A declared year always governs itself. Any other year uses the most recent
    declared year before it, so every year past the last declared rule-set
    falls back to the current one. Years before the first declaration are not
    covered.
    """

    years = list(available_years())
    position = bisect_right(years, year)
    if position == 0:
        raise RuleSetNotFoundError(
            f"No rule-set covers {year}; the earliest supported year is {years[0]}"
        )
    return years[position - 1]


def resolve_rule_set(year: int) -> YearConfiguration:
    """Return the rule-set that applies to ``year``."""

    applied_year = resolve_rule_year(year)
    if applied_year != year:
        _LOGGER.debug("Year %s has no explicit rule-set; using %s", year, applied_year)
    return load_year_configuration(applied_year)


__all__ = [
    "CONFIG_DIRECTORY",
    "ConfigurationError",
    "LevyConfig",
    "MANIFEST_FILE",
    "OffsetConfig",
    "OffsetSchedule",
    "PhaseInBand",
    "RepaymentThreshold",
    "RuleSetNotFoundError",
    "SurchargeConfig",
    "TaperSegment",
    "TaxBracket",
    "TaxYearManifest",
    "TaxYearManifestEntry",
    "YearConfiguration",
    "available_years",
    "load_manifest",
    "load_year_configuration",
    "resolve_rule_set",
    "resolve_rule_year",
]
