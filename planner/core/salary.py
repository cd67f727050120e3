"""Salary and retirement-annuity (RA) tax effects."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

from planner.core.tax import SARS_2025_26, TaxPolicy, compute_tax, marginal_rate

LimitType = Literal["27.5%_income_cap", "R350000_cap"]


class SalaryBreakdown(BaseModel):
    """Monthly view of a salary with and without an RA contribution."""

    grossMonthlySalary: float
    monthlyRaContribution: float
    deductibleAnnualRa: float
    monthlyTaxWithoutRa: float
    monthlyTaxWithRa: float
    monthlyTaxSavings: float
    netMonthlySalary: float
    effectiveRaCost: float
    savingsPct: float


class RaLimit(BaseModel):
    maxRaContribution: float
    limitType: LimitType


class RaOptimization(BaseModel):
    currentTax: float
    optimizedTax: float
    taxSavings: float
    currentMarginalRatePct: float
    recommendedRaContribution: float
    additionalRaContribution: float
    regulatoryLimits: RaLimit


def ra_deduction_cap(gross_annual_income: float, policy: TaxPolicy = SARS_2025_26) -> RaLimit:
    share_limit = max(0.0, gross_annual_income) * policy.raDeduction.incomeShare
    absolute_limit = policy.raDeduction.annualCap
    if share_limit < absolute_limit:
        return RaLimit(maxRaContribution=share_limit, limitType="27.5%_income_cap")
    return RaLimit(maxRaContribution=absolute_limit, limitType="R350000_cap")


def _taxable_after_ra(gross_annual_income: float, annual_ra: float, policy: TaxPolicy) -> float:
    # only the capped portion of the contribution reduces taxable income
    deductible = min(max(0.0, annual_ra), ra_deduction_cap(gross_annual_income, policy).maxRaContribution)
    return max(0.0, gross_annual_income - deductible)


def salary_breakdown(
    gross_annual_income: float,
    monthly_ra_contribution: float,
    age: float,
    policy: TaxPolicy = SARS_2025_26,
) -> SalaryBreakdown:
    if gross_annual_income < 0:
        raise ValueError("gross_annual_income must not be negative")
    if monthly_ra_contribution < 0:
        raise ValueError("monthly_ra_contribution must not be negative")

    annual_ra = monthly_ra_contribution * 12
    taxable = _taxable_after_ra(gross_annual_income, annual_ra, policy)

    tax_without = compute_tax(gross_annual_income, age, policy)
    tax_with = compute_tax(taxable, age, policy)
    monthly_savings = (tax_without - tax_with) / 12
    monthly_tax_with = tax_with / 12

    return SalaryBreakdown(
        grossMonthlySalary=gross_annual_income / 12,
        monthlyRaContribution=monthly_ra_contribution,
        deductibleAnnualRa=gross_annual_income - taxable,
        monthlyTaxWithoutRa=tax_without / 12,
        monthlyTaxWithRa=monthly_tax_with,
        monthlyTaxSavings=monthly_savings,
        netMonthlySalary=gross_annual_income / 12 - monthly_ra_contribution - monthly_tax_with,
        effectiveRaCost=monthly_ra_contribution - monthly_savings,
        savingsPct=(monthly_savings / monthly_ra_contribution * 100) if monthly_ra_contribution > 0 else 0.0,
    )


def optimize_ra_contribution(
    gross_annual_income: float,
    current_annual_ra: float,
    age: float,
    policy: TaxPolicy = SARS_2025_26,
) -> RaOptimization:
    """Tax at the current RA contribution against tax at the deductible maximum."""
    if gross_annual_income < 0:
        raise ValueError("gross_annual_income must not be negative")

    limit = ra_deduction_cap(gross_annual_income, policy)
    current_taxable = _taxable_after_ra(gross_annual_income, current_annual_ra, policy)
    current_tax = compute_tax(current_taxable, age, policy)
    optimized_tax = compute_tax(gross_annual_income - limit.maxRaContribution, age, policy)

    return RaOptimization(
        currentTax=current_tax,
        optimizedTax=optimized_tax,
        taxSavings=current_tax - optimized_tax,
        currentMarginalRatePct=marginal_rate(current_taxable, age, policy),
        recommendedRaContribution=limit.maxRaContribution,
        additionalRaContribution=max(0.0, limit.maxRaContribution - current_annual_ra),
        regulatoryLimits=limit,
    )
