from __future__ import annotations

from math import isclose

import pytest

from planner.core.salary import optimize_ra_contribution, ra_deduction_cap, salary_breakdown


def test_salary_breakdown_with_ra():
    breakdown = salary_breakdown(600000, 5000, 40)

    assert isclose(breakdown.grossMonthlySalary, 50000.0)
    assert isclose(breakdown.monthlyTaxWithoutRa, 135631.64 / 12)
    assert isclose(breakdown.monthlyTaxWithRa, 114031.64 / 12)
    assert isclose(breakdown.monthlyTaxSavings, 1800.0)
    assert isclose(breakdown.effectiveRaCost, 3200.0)
    assert isclose(breakdown.savingsPct, 36.0)
    assert isclose(breakdown.netMonthlySalary, 50000.0 - 5000.0 - 114031.64 / 12)


def test_only_capped_ra_is_deductible():
    breakdown = salary_breakdown(100000, 5000, 40)

    assert isclose(breakdown.deductibleAnnualRa, 27500.0)


def test_salary_breakdown_without_ra():
    breakdown = salary_breakdown(300000, 0, 40)

    assert breakdown.monthlyTaxSavings == 0.0
    assert breakdown.savingsPct == 0.0
    assert breakdown.monthlyTaxWithRa == breakdown.monthlyTaxWithoutRa


def test_salary_breakdown_rejects_negative_income():
    with pytest.raises(ValueError):
        salary_breakdown(-1, 0, 40)


def test_ra_cap_switches_to_absolute_limit():
    assert ra_deduction_cap(600000).limitType == "27.5%_income_cap"
    assert isclose(ra_deduction_cap(600000).maxRaContribution, 165000.0)
    assert ra_deduction_cap(2_000_000).limitType == "R350000_cap"
    assert ra_deduction_cap(2_000_000).maxRaContribution == 350000


def test_optimize_ra_contribution():
    result = optimize_ra_contribution(600000, 0, 40)

    assert isclose(result.currentTax, 135631.64)
    assert isclose(result.optimizedTax, 80121.69)
    assert isclose(result.taxSavings, 135631.64 - 80121.69)
    assert isclose(result.recommendedRaContribution, 165000.0)
    assert isclose(result.additionalRaContribution, 165000.0)
    assert isclose(result.currentMarginalRatePct, 36.0)
    assert result.regulatoryLimits.limitType == "27.5%_income_cap"


def test_already_maxed_ra_saves_nothing():
    result = optimize_ra_contribution(600000, 200000, 40)

    assert isclose(result.taxSavings, 0.0, abs_tol=1e-9)
    assert result.additionalRaContribution == 0.0
