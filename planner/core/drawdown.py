"""Post-retirement drawdown.

Conventions (per year of retirement, twelve monthly steps):
  1) Apply the monthly return to the running balance.
  2) Withdraw a twelfth of the year's inflation-escalated draw, capped at
     what is left.
  3) At year end, settle income tax on the year's total withdrawal out of
     the fund.

The annual draw is fixed in real terms at retirement: nest_egg * rate,
escalated by inflation each year, never recomputed from the current balance.
The projection ledger runs its retirement years through the same step.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from planner.config import settings
from planner.core.formulas import escalation_factor, monthly_rate, present_value
from planner.core.tax import SARS_2025_26, TaxPolicy, compute_tax
from planner.models import Phase, ProjectionRow

# SARS living annuity drawdown band
LIVING_ANNUITY_MIN_PCT = 2.5
LIVING_ANNUITY_MAX_PCT = 17.5

ALTERNATIVE_RATES_PCT = (4.0, 5.0)


@dataclass(frozen=True)
class DrawdownResult:
    annual_drawdown: float
    # first-year monthly figure, before any inflation escalation
    periodic_withdrawal: float
    schedule: List[ProjectionRow]

    @property
    def depleted(self) -> bool:
        return bool(self.schedule) and self.schedule[-1].endingBalance <= 0

    @property
    def depletion_age(self) -> Optional[int]:
        return self.schedule[-1].age if self.depleted else None


@dataclass(frozen=True)
class RetirementYear:
    investment_return: float
    withdrawal: float
    tax_paid: float
    ending_balance: float


def annual_drawdown(nest_egg: float, drawdown_rate_pct: float) -> float:
    return nest_egg * drawdown_rate_pct / 100


def withdrawal_for_year(annual_amount: float, inflation_pct: float, years_into_retirement: int) -> float:
    return annual_amount * escalation_factor(inflation_pct, years_into_retirement)


def retirement_year_step(
    balance: float,
    planned_withdrawal: float,
    rate: float,
    age: int,
    policy: TaxPolicy,
    epsilon: float,
) -> RetirementYear:
    """One retirement year; rate is the monthly return as a fraction."""
    growth = withdrawn = 0.0
    monthly_draw = planned_withdrawal / 12

    for _ in range(12):
        step = balance * rate
        balance += step
        growth += step

        take = min(monthly_draw, balance)
        balance -= take
        withdrawn += take

    tax_paid = min(compute_tax(withdrawn, age, policy), balance)
    balance -= tax_paid

    # dust below epsilon goes out with the final withdrawal
    if balance < epsilon:
        withdrawn += balance
        balance = 0.0

    return RetirementYear(
        investment_return=growth,
        withdrawal=withdrawn,
        tax_paid=tax_paid,
        ending_balance=balance,
    )


def drawdown(
    nest_egg: float,
    retirement_age: int,
    life_expectancy: int,
    annual_return_pct: float,
    inflation_pct: float,
    drawdown_rate_pct: float,
    policy: TaxPolicy = SARS_2025_26,
    retirement_year: Optional[int] = None,
    years_from_today: int = 0,
    epsilon: Optional[float] = None,
) -> DrawdownResult:
    """
    Build the retirement schedule from retirement_age to life_expectancy
    (inclusive), stopping early once the fund is exhausted.

    years_from_today shifts the inflation deflator so real balances are in
    today's Rand rather than retirement-day Rand.
    """
    epsilon = settings.depletion_epsilon if epsilon is None else epsilon
    annual = annual_drawdown(nest_egg, drawdown_rate_pct)
    year0 = retirement_year or datetime.now().year
    rate = monthly_rate(annual_return_pct)

    balance = float(nest_egg)
    schedule: List[ProjectionRow] = []

    for period, age in enumerate(range(retirement_age, life_expectancy + 1)):
        if balance <= 0:
            break
        starting = balance
        year = retirement_year_step(
            balance,
            withdrawal_for_year(annual, inflation_pct, period),
            rate,
            age,
            policy,
            epsilon,
        )
        balance = year.ending_balance

        schedule.append(
            ProjectionRow(
                period=period,
                age=age,
                year=year0 + period,
                phase=Phase.DRAWING_DOWN,
                beginningBalance=starting,
                contribution=0.0,
                investmentReturn=year.investment_return,
                withdrawal=year.withdrawal,
                taxPaid=year.tax_paid,
                netIncome=year.withdrawal - year.tax_paid,
                endingBalance=balance,
                inflationAdjustedBalance=present_value(balance, inflation_pct, years_from_today + period),
            )
        )

    return DrawdownResult(annual_drawdown=annual, periodic_withdrawal=annual / 12, schedule=schedule)


class DrawdownAlternative(BaseModel):
    drawdownRatePct: float
    monthlyIncome: float
    yearsLasts: int
    sustainable: bool


class DrawdownStrategy(BaseModel):
    initialDrawdownRatePct: float
    recommendedDrawdownRatePct: float
    sustainable: bool
    yearsMoneyLasts: int
    endBalance: float
    finalYearAnnualIncome: float
    warnings: List[str] = []
    alternatives: List[DrawdownAlternative] = []


def drawdown_strategy(
    retirement_balance: float,
    desired_monthly_income: float,
    years_to_plan: int,
    inflation_pct: float,
    expected_return_pct: float,
    retirement_age: int = 65,
    policy: TaxPolicy = SARS_2025_26,
) -> DrawdownStrategy:
    """Check whether a desired retirement income lasts years_to_plan years."""
    if retirement_balance <= 0:
        raise ValueError("retirement_balance must be positive")
    if years_to_plan < 1:
        raise ValueError("years_to_plan must be at least 1")

    last_age = retirement_age + years_to_plan - 1
    desired_annual = desired_monthly_income * 12
    initial_rate = desired_annual / retirement_balance * 100

    result = drawdown(
        retirement_balance,
        retirement_age,
        last_age,
        expected_return_pct,
        inflation_pct,
        initial_rate,
        policy,
    )
    sustainable = not result.depleted
    warnings: List[str] = []

    if not sustainable:
        warnings.append(
            f"Funds will be depleted after {len(result.schedule)} years at this drawdown rate."
        )
    if initial_rate < LIVING_ANNUITY_MIN_PCT:
        warnings.append(
            f"Drawdown rate of {initial_rate:.1f}% is below the living annuity minimum of {LIVING_ANNUITY_MIN_PCT}%."
        )
    elif initial_rate > LIVING_ANNUITY_MAX_PCT:
        warnings.append(
            f"Drawdown rate of {initial_rate:.1f}% exceeds the living annuity maximum of {LIVING_ANNUITY_MAX_PCT}%."
        )

    alternatives: List[DrawdownAlternative] = []
    if not sustainable:
        for alt_rate in ALTERNATIVE_RATES_PCT:
            alt = drawdown(
                retirement_balance,
                retirement_age,
                last_age,
                expected_return_pct,
                inflation_pct,
                alt_rate,
                policy,
            )
            alternatives.append(
                DrawdownAlternative(
                    drawdownRatePct=alt_rate,
                    monthlyIncome=alt.periodic_withdrawal,
                    yearsLasts=len(alt.schedule),
                    sustainable=not alt.depleted,
                )
            )

    return DrawdownStrategy(
        initialDrawdownRatePct=initial_rate,
        recommendedDrawdownRatePct=min(max(initial_rate, LIVING_ANNUITY_MIN_PCT), LIVING_ANNUITY_MAX_PCT),
        sustainable=sustainable,
        yearsMoneyLasts=len(result.schedule),
        endBalance=result.schedule[-1].endingBalance if result.schedule else 0.0,
        finalYearAnnualIncome=withdrawal_for_year(desired_annual, inflation_pct, years_to_plan - 1),
        warnings=warnings,
        alternatives=alternatives,
    )
