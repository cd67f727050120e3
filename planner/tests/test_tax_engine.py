from __future__ import annotations

import logging
from math import isclose

import pytest
from pydantic import ValidationError

from planner.core.tax import (
    SARS_2025_26,
    Rebates,
    TaxBracket,
    TaxPolicy,
    assess_income_tax,
    compute_tax,
    find_bracket,
    marginal_rate,
    tax_free_threshold,
)


def test_known_income_tax_values():
    assert isclose(compute_tax(200000, 60), 18765.0)
    assert isclose(compute_tax(500000, 60), 100271.69)
    assert isclose(compute_tax(500000, 70), 90827.69)


def test_income_below_threshold_is_tax_free():
    assert compute_tax(50000, 60) == 0.0
    assert compute_tax(0, 40) == 0.0
    assert compute_tax(-1000, 40) == 0.0


def test_top_bracket_is_open_ended():
    assert compute_tax(2000000, 60) > 600000
    assert find_bracket(SARS_2025_26.brackets, 10_000_000).rate == 0.45


def test_rebate_tiers_by_age():
    assert isclose(compute_tax(500000, 64) - compute_tax(500000, 65), 9444.0)
    assert isclose(compute_tax(500000, 74) - compute_tax(500000, 75), 3145.0)


def test_tax_is_monotonic_in_income():
    for age in (30, 65, 75):
        previous = 0.0
        for income in range(0, 2_500_000, 997):
            current = compute_tax(income, age)
            assert current >= previous
            previous = current


def test_tax_never_rises_with_age():
    for income in (80000, 150000, 300000, 750000, 1_500_000):
        assert compute_tax(income, 40) >= compute_tax(income, 65) >= compute_tax(income, 80)


def test_bracket_boundaries_are_continuous():
    brackets = SARS_2025_26.brackets
    for lower, upper in zip(brackets, brackets[1:]):
        at_max = assess_income_tax(lower.max, 30).grossTax
        at_next_min = assess_income_tax(upper.min, 30).grossTax
        step = at_next_min - at_max
        assert -1e-6 <= step <= lower.rate + 1e-6


def test_fractional_income_between_brackets_stays_flat():
    assert isclose(compute_tax(237100.5, 30), compute_tax(237100, 30))


def test_assessment_reports_bracket_and_rebate():
    assessment = assess_income_tax(500000, 70)

    assert assessment.bracket.min == 370501
    assert isclose(assessment.rebate, 17235 + 9444)
    assert isclose(assessment.grossTax - assessment.rebate, assessment.tax)
    assert assessment.unmatched is False


def test_unmatched_bracket_is_flagged_and_logged(caplog):
    broken = TaxPolicy.model_construct(
        taxYear="broken",
        brackets=[TaxBracket(min=100000, max=None, rate=0.2, baseTax=0)],
        rebates=Rebates(primary=0, secondary=0, tertiary=0),
    )

    with caplog.at_level(logging.WARNING, logger="planner.core.tax"):
        assessment = assess_income_tax(50000, 40, broken)

    assert assessment.tax == 0.0
    assert assessment.unmatched is True
    assert "no broken tax bracket matched" in caplog.text


def test_policy_rejects_gapped_table():
    with pytest.raises(ValidationError):
        TaxPolicy(
            taxYear="gapped",
            brackets=[
                TaxBracket(min=0, max=100000, rate=0.18, baseTax=0),
                TaxBracket(min=200000, max=None, rate=0.26, baseTax=18000),
            ],
            rebates=Rebates(primary=0, secondary=0, tertiary=0),
        )


def test_policy_rejects_table_not_starting_at_zero():
    with pytest.raises(ValidationError):
        TaxPolicy(
            taxYear="late-start",
            brackets=[TaxBracket(min=1, max=None, rate=0.18, baseTax=0)],
            rebates=Rebates(primary=0, secondary=0, tertiary=0),
        )


def test_marginal_rate_and_threshold():
    assert isclose(marginal_rate(500000, 60), 31.0)
    assert marginal_rate(50000, 60) == 0.0
    assert isclose(tax_free_threshold(60), 95750.0)
    assert isclose(tax_free_threshold(65), 148216.67)
    assert isclose(tax_free_threshold(75), 165688.89)
