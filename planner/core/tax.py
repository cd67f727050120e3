"""SARS income tax and the related withholding calculations.

Everything here is driven by a ``TaxPolicy`` value object so the accumulation
display, the drawdown simulation and the salary breakdown all read the same
table. ``SARS_2025_26`` is the canonical policy.
"""

from __future__ import annotations

import logging
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

logger = logging.getLogger(__name__)


class TaxBracket(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    min: float = Field(ge=0)
    max: Optional[float] = None  # None => open-ended top bracket
    rate: float = Field(ge=0, le=1)
    baseTax: float = Field(ge=0)

    def covers(self, income: float, next_min: Optional[float]) -> bool:
        """True when income falls in [min, next_min); the top bracket is open."""
        if income < self.min:
            return False
        return next_min is None or income < next_min


class Rebates(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    primary: float = Field(ge=0)
    secondary: float = Field(ge=0)
    tertiary: float = Field(ge=0)
    secondaryAge: int = 65
    tertiaryAge: int = 75

    def for_age(self, age: float) -> float:
        total = self.primary
        if age >= self.secondaryAge:
            total += self.secondary
        if age >= self.tertiaryAge:
            total += self.tertiary
        return total


class CapitalGainsRules(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    inclusionRate: float = Field(ge=0, le=1)
    annualExclusion: float = Field(ge=0)


class InterestExemptions(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    under65: float = Field(ge=0)
    over65: float = Field(ge=0)


class RaDeductionLimits(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    incomeShare: float = Field(ge=0, le=1)
    annualCap: float = Field(ge=0)


def _check_table(brackets: List[TaxBracket], label: str) -> None:
    if not brackets:
        raise ValueError(f"{label} requires at least one bracket")
    if brackets[0].min != 0:
        raise ValueError(f"{label} must start at 0")
    for lower, upper in zip(brackets, brackets[1:]):
        if lower.max is None:
            raise ValueError(f"{label} has an open bracket before the top at {lower.min:g}")
        if lower.max + 1 != upper.min:
            raise ValueError(f"{label} gap or overlap between {lower.max:g} and {upper.min:g}")
    if brackets[-1].max is not None:
        raise ValueError(f"{label} top bracket must be open-ended")


class TaxPolicy(BaseModel):
    """One tax year's tables and rebate rules."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    taxYear: str
    brackets: List[TaxBracket]
    rebates: Rebates
    lumpSumBrackets: List[TaxBracket] = Field(default_factory=list)
    capitalGains: CapitalGainsRules = CapitalGainsRules(inclusionRate=0.0, annualExclusion=0.0)
    dividendWithholdingRate: float = Field(default=0.0, ge=0, le=1)
    interestExemptions: InterestExemptions = InterestExemptions(under65=0.0, over65=0.0)
    raDeduction: RaDeductionLimits = RaDeductionLimits(incomeShare=0.0, annualCap=0.0)

    @model_validator(mode="after")
    def ensure_gapless(self) -> "TaxPolicy":
        _check_table(self.brackets, "income tax table")
        if self.lumpSumBrackets:
            _check_table(self.lumpSumBrackets, "lump-sum table")
        return self


SARS_2025_26 = TaxPolicy(
    taxYear="2025/26",
    brackets=[
        TaxBracket(min=0, max=237100, rate=0.18, baseTax=0),
        TaxBracket(min=237101, max=370500, rate=0.26, baseTax=42678),
        TaxBracket(min=370501, max=512800, rate=0.31, baseTax=77362),
        TaxBracket(min=512801, max=673000, rate=0.36, baseTax=121475),
        TaxBracket(min=673001, max=857900, rate=0.39, baseTax=179147),
        TaxBracket(min=857901, max=1817000, rate=0.41, baseTax=251258),
        TaxBracket(min=1817001, max=None, rate=0.45, baseTax=644489),
    ],
    rebates=Rebates(primary=17235, secondary=9444, tertiary=3145),
    lumpSumBrackets=[
        TaxBracket(min=0, max=550000, rate=0.0, baseTax=0),
        TaxBracket(min=550001, max=770000, rate=0.18, baseTax=0),
        TaxBracket(min=770001, max=1155000, rate=0.27, baseTax=39600),
        TaxBracket(min=1155001, max=None, rate=0.36, baseTax=143550),
    ],
    capitalGains=CapitalGainsRules(inclusionRate=0.4, annualExclusion=40000),
    dividendWithholdingRate=0.2,
    interestExemptions=InterestExemptions(under65=23800, over65=34500),
    raDeduction=RaDeductionLimits(incomeShare=0.275, annualCap=350000),
)


class TaxAssessment(BaseModel):
    """Breakdown behind a single compute_tax() figure."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    income: float
    age: float
    grossTax: float
    rebate: float
    tax: float
    bracket: Optional[TaxBracket] = None
    # set when the table has no bracket for a positive income (a defect, not a zero-tax result)
    unmatched: bool = False


def find_bracket(brackets: List[TaxBracket], income: float) -> Optional[TaxBracket]:
    for index, bracket in enumerate(brackets):
        next_min = brackets[index + 1].min if index + 1 < len(brackets) else None
        if bracket.covers(income, next_min):
            return bracket
    return None


def _tax_from_table(bracket: TaxBracket, income: float) -> float:
    # incomes between max and the next min (fractional Rands) stay at the max value
    capped = income if bracket.max is None else min(income, bracket.max)
    return bracket.baseTax + max(0.0, capped - bracket.min) * bracket.rate


def assess_income_tax(income: float, age: float, policy: TaxPolicy = SARS_2025_26) -> TaxAssessment:
    if income <= 0:
        return TaxAssessment(income=income, age=age, grossTax=0.0, rebate=0.0, tax=0.0)

    bracket = find_bracket(policy.brackets, income)
    if bracket is None:
        logger.warning(
            "no %s tax bracket matched income %.2f; returning zero tax",
            policy.taxYear,
            income,
        )
        return TaxAssessment(income=income, age=age, grossTax=0.0, rebate=0.0, tax=0.0, unmatched=True)

    gross = _tax_from_table(bracket, income)
    rebate = policy.rebates.for_age(age)
    return TaxAssessment(
        income=income,
        age=age,
        grossTax=gross,
        rebate=rebate,
        tax=max(0.0, gross - rebate),
        bracket=bracket,
    )


def compute_tax(annual_taxable_income: float, age: float, policy: TaxPolicy = SARS_2025_26) -> float:
    """Progressive income tax after age rebates, never negative."""
    return assess_income_tax(annual_taxable_income, age, policy).tax


def marginal_rate(income: float, age: float, policy: TaxPolicy = SARS_2025_26) -> float:
    """Tax on the next Rand, as a percentage."""
    if income <= 0:
        return 0.0
    step = compute_tax(income + 1, age, policy) - compute_tax(income, age, policy)
    return round(step * 100, 2)


def tax_free_threshold(age: float, policy: TaxPolicy = SARS_2025_26) -> float:
    """Income below which the rebates cancel all first-bracket tax."""
    first = policy.brackets[0]
    if first.rate == 0:
        return first.max if first.max is not None else 0.0
    return round(policy.rebates.for_age(age) / first.rate, 2)


def lump_sum_tax(amount: float, policy: TaxPolicy = SARS_2025_26) -> float:
    """Tax on a retirement annuity lump-sum withdrawal (no rebates)."""
    if amount <= 0 or not policy.lumpSumBrackets:
        return 0.0
    bracket = find_bracket(policy.lumpSumBrackets, amount)
    if bracket is None:
        logger.warning("no %s lump-sum bracket matched %.2f", policy.taxYear, amount)
        return 0.0
    return _tax_from_table(bracket, amount)


def capital_gains_tax(gain: float, marginal_rate_pct: float, policy: TaxPolicy = SARS_2025_26) -> float:
    if gain <= 0:
        return 0.0
    rules = policy.capitalGains
    taxable = max(0.0, gain - rules.annualExclusion)
    return taxable * rules.inclusionRate * (marginal_rate_pct / 100)


def dividend_tax(dividends: float, policy: TaxPolicy = SARS_2025_26) -> float:
    if dividends <= 0:
        return 0.0
    return dividends * policy.dividendWithholdingRate


def interest_tax(
    interest: float,
    age: float,
    marginal_rate_pct: float,
    policy: TaxPolicy = SARS_2025_26,
) -> float:
    if interest <= 0:
        return 0.0
    exemptions = policy.interestExemptions
    exemption = exemptions.over65 if age >= policy.rebates.secondaryAge else exemptions.under65
    return max(0.0, interest - exemption) * (marginal_rate_pct / 100)


WithdrawalKind = Literal["annuity", "lump_sum"]


def withdrawal_tax(
    amount: float,
    age: float,
    kind: WithdrawalKind = "annuity",
    policy: TaxPolicy = SARS_2025_26,
) -> float:
    """Annuity income goes through the income table, lump sums through their own."""
    if kind == "lump_sum":
        return lump_sum_tax(amount, policy)
    return compute_tax(amount, age, policy)


__all__ = [
    "TaxBracket",
    "Rebates",
    "CapitalGainsRules",
    "InterestExemptions",
    "RaDeductionLimits",
    "TaxPolicy",
    "TaxAssessment",
    "SARS_2025_26",
    "find_bracket",
    "assess_income_tax",
    "compute_tax",
    "marginal_rate",
    "tax_free_threshold",
    "lump_sum_tax",
    "capital_gains_tax",
    "dividend_tax",
    "interest_tax",
    "withdrawal_tax",
]
