"""Unit tests for the liability engine."""

from __future__ import annotations

import pytest

from taxreceipt.backend.app.models import InputContractError, LiabilityContext
from taxreceipt.backend.app.services.liability_service import compute_liability
from taxreceipt.backend.config.schema import TaxBracket
from taxreceipt.backend.config.year_config import YearConfiguration, load_year_configuration

COVERED = LiabilityContext(has_qualifying_cover=True)


@pytest.fixture()
def rules() -> YearConfiguration:
    return load_year_configuration(2024)


@pytest.fixture()
def two_bracket_rules(rules: YearConfiguration) -> YearConfiguration:
    return rules.model_copy(
        update={
            "brackets": (
                TaxBracket(threshold=18200, rate=0.16, base=0),
                TaxBracket(threshold=45000, rate=0.30, base=4288),
            )
        }
    )


def test_two_bracket_scenario(two_bracket_rules: YearConfiguration) -> None:
    liability = compute_liability(97500, two_bracket_rules, COVERED)

    assert liability.gross_tax == pytest.approx(20038)
    assert liability.surcharge_amount == 0.0
    assert liability.repayment_amount == 0.0
    assert liability.marginal_rate == 0.30


def test_total_is_sum_of_components(rules: YearConfiguration) -> None:
    context = LiabilityContext(has_qualifying_cover=False, outstanding_loan_balance=25000)

    liability = compute_liability(97500, rules, context)

    assert liability.gross_tax == pytest.approx(20038)
    assert liability.levy_amount == pytest.approx(1950)
    assert liability.surcharge_amount == pytest.approx(1462.5)
    assert liability.repayment_amount == pytest.approx(5850)
    assert liability.total_before_offsets == pytest.approx(20038 + 1950 + 1462.5 + 5850)
    assert liability.tax_payable == liability.total_before_offsets
    assert liability.effective_rate == pytest.approx(liability.total_before_offsets / 97500)


def test_default_context_applies_surcharge(rules: YearConfiguration) -> None:
    liability = compute_liability(97500, rules)

    assert liability.surcharge_amount == pytest.approx(1462.5)
    assert liability.repayment_amount == 0.0


def test_zero_income_has_no_effective_rate(rules: YearConfiguration) -> None:
    liability = compute_liability(0, rules, COVERED)

    assert liability.total_before_offsets == 0.0
    assert liability.effective_rate is None


def test_negative_income_is_rejected(rules: YearConfiguration) -> None:
    with pytest.raises(InputContractError):
        compute_liability(-1, rules)


def test_repayment_never_exceeds_balance(rules: YearConfiguration) -> None:
    context = LiabilityContext(has_qualifying_cover=True, outstanding_loan_balance=750)

    for income in range(50000, 200001, 10000):
        assert compute_liability(income, rules, context).repayment_amount <= 750


def test_liability_is_monotonic_in_income(rules: YearConfiguration) -> None:
    context = LiabilityContext(has_qualifying_cover=False, outstanding_loan_balance=40000)
    previous = 0.0

    for income in range(0, 260001, 250):
        total = compute_liability(income, rules, context).total_before_offsets
        assert total >= previous - 1e-9
        previous = total


def test_liability_as_dict_includes_payable(rules: YearConfiguration) -> None:
    payload = compute_liability(50000, rules, COVERED).as_dict()

    assert payload["tax_payable"] == payload["total_before_offsets"]
    assert payload["taxable_income"] == 50000
