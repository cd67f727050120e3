"""Baseline vs adjusted scenario deltas."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel

from planner.core.accumulation import AccumulationResult, accumulate
from planner.core.drawdown import annual_drawdown
from planner.core.projection import project
from planner.core.tax import SARS_2025_26, TaxPolicy
from planner.models import Phase, ProjectionRow, ScenarioInput


class ScenarioDelta(BaseModel):
    nestEggDelta: float
    drawdownDelta: float


@dataclass(frozen=True)
class Headline:
    accumulation: AccumulationResult
    monthly_drawdown: float
    schedule: List[ProjectionRow]

    @property
    def nest_egg(self) -> float:
        return self.accumulation.final_balance


def headline(
    scenario: ScenarioInput,
    policy: TaxPolicy = SARS_2025_26,
    base_year: Optional[int] = None,
) -> Headline:
    """Nest egg at retirement and the retirement rows of the full ledger."""
    accumulated = accumulate(
        scenario.startingBalance,
        scenario.monthlyContribution,
        scenario.annualReturnPct,
        scenario.inflationPct,
        scenario.months_until_retirement,
    )
    rows = project(scenario, policy, base_year)
    return Headline(
        accumulation=accumulated,
        monthly_drawdown=annual_drawdown(accumulated.final_balance, scenario.drawdownRatePct) / 12,
        schedule=[row for row in rows if row.phase is Phase.DRAWING_DOWN],
    )


def delta_between(baseline: Headline, adjusted: Headline) -> ScenarioDelta:
    return ScenarioDelta(
        nestEggDelta=adjusted.nest_egg - baseline.nest_egg,
        drawdownDelta=adjusted.monthly_drawdown - baseline.monthly_drawdown,
    )


def compare(
    baseline: ScenarioInput,
    adjusted: ScenarioInput,
    policy: TaxPolicy = SARS_2025_26,
) -> ScenarioDelta:
    """adjusted minus baseline; compare(a, b) == -compare(b, a)."""
    return delta_between(headline(baseline, policy), headline(adjusted, policy))


__all__ = ["ScenarioDelta", "Headline", "headline", "delta_between", "compare"]
