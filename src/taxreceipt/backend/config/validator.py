"""Utilities for validating rule-set data and surfacing issues."""

from __future__ import annotations

import argparse
from typing import Sequence

from .year_config import (
    OffsetSchedule,
    RepaymentThreshold,
    SurchargeConfig,
    TaxBracket,
    YearConfiguration,
    available_years,
    load_year_configuration,
)

# Published bases are rounded to whole dollars.
_BASE_TOLERANCE = 1.0


def _format_scope(scope: str, message: str) -> str:
    return f"{scope}: {message}"


def _validate_brackets(brackets: Sequence[TaxBracket]) -> list[str]:
    errors: list[str] = []

    if brackets[0].base != 0:
        errors.append(_format_scope("brackets", "the first bracket must carry a zero base"))

    for previous, current in zip(brackets, brackets[1:]):
        expected = previous.base + (current.threshold - previous.threshold) * previous.rate
        if abs(expected - current.base) > _BASE_TOLERANCE:
            errors.append(
                _format_scope(
                    "brackets",
                    (
                        f"base {current.base:g} at threshold {current.threshold:g} "
                        f"does not continue the previous bracket (expected {expected:g})"
                    ),
                )
            )

    rates = [bracket.rate for bracket in brackets]
    if rates != sorted(rates):
        errors.append(_format_scope("brackets", "marginal rates should not decrease"))

    return errors


def _validate_surcharge(surcharge: SurchargeConfig) -> list[str]:
    errors: list[str] = []

    if surcharge.family_threshold < surcharge.single_threshold:
        errors.append(
            _format_scope(
                "surcharge",
                "family threshold should not be lower than the single threshold",
            )
        )

    return errors


def _validate_repayment(table: Sequence[RepaymentThreshold]) -> list[str]:
    errors: list[str] = []

    rates = [entry.rate for entry in table]
    if rates != sorted(rates):
        errors.append(_format_scope("repayment", "rates should not decrease"))

    return errors


def _validate_offset(scope: str, schedule: OffsetSchedule | None) -> list[str]:
    if schedule is None:
        return []

    errors: list[str] = []
    previous_end = schedule.full_amount_until
    for segment in schedule.segments:
        if segment.start != previous_end:
            errors.append(
                _format_scope(
                    scope,
                    f"segment starting at {segment.start:g} leaves a gap after {previous_end:g}",
                )
            )
        previous_end = segment.end

    return errors


def validate_year_configuration(config: YearConfiguration) -> list[str]:
    """Return a list of validation issues for the provided configuration."""

    errors: list[str] = []

    errors.extend(_validate_brackets(config.brackets))
    errors.extend(_validate_surcharge(config.surcharge))
    errors.extend(_validate_repayment(config.repayment))
    errors.extend(_validate_offset("offsets.low_income", config.offsets.low_income))
    errors.extend(
        _validate_offset("offsets.low_middle_income", config.offsets.low_middle_income)
    )

    return errors


def validate_all_years(years: Sequence[int] | None = None) -> dict[int, list[str]]:
    """Validate all configured years and return issues keyed by year."""

    targets = years or available_years()
    results: dict[int, list[str]] = {}

    for year in targets:
        config = load_year_configuration(year)
        results[int(year)] = validate_year_configuration(config)

    return results


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate configured rule-sets and report issues helpful to contributors."
    )
    parser.add_argument(
        "years",
        nargs="*",
        type=int,
        help="Specific years to validate (defaults to all configured years)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for running validations from the command line."""

    parser = _build_argument_parser()
    args = parser.parse_args(argv)
    years = args.years or available_years()

    if not years:
        parser.print_help()
        return 1

    exit_code = 0

    for year in years:
        try:
            config = load_year_configuration(year)
        except FileNotFoundError as error:
            print(f"[{year}] failed to load configuration: {error}")
            exit_code = 1
            continue

        issues = validate_year_configuration(config)
        if issues:
            exit_code = 1
            print(f"[{year}] {len(issues)} issue(s) detected:")
            for issue in issues:
                print(f"  - {issue}")
        else:
            print(f"[{year}] OK")

    return exit_code


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    raise SystemExit(main())
