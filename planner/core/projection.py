from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from pydantic import BaseModel

from planner.config import settings
from planner.core.accumulation import contribution_for_month
from planner.core.drawdown import annual_drawdown, retirement_year_step, withdrawal_for_year
from planner.core.formulas import monthly_rate, present_value
from planner.core.statistics import aggregate
from planner.core.tax import SARS_2025_26, TaxPolicy
from planner.models import Phase, ProjectionRow, ScenarioInput, Statistics

logger = logging.getLogger(__name__)


class ProjectionResult(BaseModel):
    rows: List[ProjectionRow]
    statistics: Statistics
    finalPhase: Phase
    truncated: bool = False


def phase_for_age(age: int, scenario: ScenarioInput) -> Phase:
    return Phase.ACCUMULATING if age < scenario.retirementAge else Phase.DRAWING_DOWN


def projection_horizon(scenario: ScenarioInput, max_years: Optional[int] = None) -> int:
    """Number of yearly rows to simulate, capped so a bad input cannot loop forever."""
    ceiling = settings.max_projection_years if max_years is None else max_years
    return min(scenario.lifeExpectancy - scenario.currentAge + 1, ceiling)


def _simulate(
    scenario: ScenarioInput,
    policy: TaxPolicy,
    base_year: Optional[int],
    max_years: Optional[int],
    epsilon: Optional[float],
) -> Tuple[List[ProjectionRow], Phase, bool]:
    epsilon = settings.depletion_epsilon if epsilon is None else epsilon
    rate = monthly_rate(scenario.annualReturnPct)
    year0 = base_year or datetime.now().year
    horizon = projection_horizon(scenario, max_years)
    truncated = horizon < scenario.lifeExpectancy - scenario.currentAge + 1
    if truncated:
        logger.warning(
            "projection from age %d truncated to %d years (life expectancy %d)",
            scenario.currentAge,
            horizon,
            scenario.lifeExpectancy,
        )

    balance = float(scenario.startingBalance)
    annual_draw: Optional[float] = None
    rows: List[ProjectionRow] = []
    final_phase = Phase.COMPLETED

    for period in range(horizon):
        age = scenario.currentAge + period
        phase = phase_for_age(age, scenario)
        starting = balance
        growth = contributed = withdrawn = tax_paid = 0.0

        if phase is Phase.ACCUMULATING:
            # return first, then the escalated contribution, twelve times
            for month in range(12):
                step = balance * rate
                balance += step
                growth += step

                contribution = contribution_for_month(
                    scenario.monthlyContribution,
                    scenario.inflationPct,
                    period * 12 + month,
                )
                balance += contribution
                contributed += contribution
        else:
            if annual_draw is None:
                # fixed at the balance carried into the first retirement year
                annual_draw = annual_drawdown(balance, scenario.drawdownRatePct)
            year = retirement_year_step(
                balance,
                withdrawal_for_year(annual_draw, scenario.inflationPct, age - scenario.retirementAge),
                rate,
                age,
                policy,
                epsilon,
            )
            growth = year.investment_return
            withdrawn = year.withdrawal
            tax_paid = year.tax_paid
            balance = year.ending_balance

        rows.append(
            ProjectionRow(
                period=period,
                age=age,
                year=year0 + period,
                phase=phase,
                beginningBalance=starting,
                contribution=contributed,
                investmentReturn=growth,
                withdrawal=withdrawn,
                taxPaid=tax_paid,
                netIncome=withdrawn - tax_paid,
                endingBalance=balance,
                inflationAdjustedBalance=present_value(balance, scenario.inflationPct, period),
            )
        )

        if balance <= 0:
            final_phase = Phase.DEPLETED
            break

    if final_phase is Phase.DEPLETED:
        truncated = False
    elif truncated and rows:
        # the ceiling cut the ledger short; report where it stopped
        final_phase = rows[-1].phase

    return rows, final_phase, truncated


def project(
    scenario: ScenarioInput,
    policy: TaxPolicy = SARS_2025_26,
    base_year: Optional[int] = None,
    max_years: Optional[int] = None,
    epsilon: Optional[float] = None,
) -> List[ProjectionRow]:
    """
    Year-by-year ledger from currentAge to lifeExpectancy (inclusive).

    Working years compound monthly and add inflation-escalated contributions.
    Retirement years compound monthly, withdraw a twelfth of the escalated
    annual draw each month and pay income tax once at year end. The ledger
    stops after the first year that ends with nothing left.
    """
    rows, _, _ = _simulate(scenario, policy, base_year, max_years, epsilon)
    return rows


def run_projection(
    scenario: ScenarioInput,
    policy: TaxPolicy = SARS_2025_26,
    base_year: Optional[int] = None,
    max_years: Optional[int] = None,
) -> ProjectionResult:
    """
    Ledger plus its summary statistics.

    When the iteration ceiling stops the ledger before lifeExpectancy,
    ``truncated`` is set and ``finalPhase`` is the phase of the last row.
    """
    rows, final_phase, truncated = _simulate(scenario, policy, base_year, max_years, None)
    total_contributed = scenario.startingBalance + sum(row.contribution for row in rows)
    return ProjectionResult(
        rows=rows,
        statistics=aggregate(rows, total_contributed),
        finalPhase=final_phase,
        truncated=truncated,
    )


__all__ = [
    "ProjectionResult",
    "phase_for_age",
    "projection_horizon",
    "project",
    "run_projection",
]
