"""Pre-retirement accumulation with monthly compounding."""

from __future__ import annotations

from dataclasses import dataclass

from planner.core.formulas import escalation_factor, monthly_rate


@dataclass(frozen=True)
class AccumulationResult:
    final_balance: float
    # escalated contributions actually paid in, excluding the starting balance
    total_contributed: float
    total_return: float


def contribution_for_month(monthly_contribution: float, inflation_pct: float, month_index: int) -> float:
    """Contribution for month m (zero-based from simulation start), escalated once per elapsed year."""
    return monthly_contribution * escalation_factor(inflation_pct, month_index // 12)


def accumulate(
    starting_balance: float,
    monthly_contribution: float,
    annual_return_pct: float,
    inflation_pct: float,
    months_until_retirement: int,
) -> AccumulationResult:
    """
    Order of operations (per month):
      1) Apply the monthly return to the running balance.
      2) Add this month's inflation-escalated contribution (no growth this month).

    With a zero rate step 1 adds nothing, so contributions sum linearly.
    Inputs are assumed validated by the caller.
    """
    rate = monthly_rate(annual_return_pct)
    balance = float(starting_balance)
    contributed = 0.0
    returned = 0.0

    for month in range(max(0, months_until_retirement)):
        growth = balance * rate
        balance += growth
        returned += growth

        contribution = contribution_for_month(monthly_contribution, inflation_pct, month)
        balance += contribution
        contributed += contribution

    return AccumulationResult(final_balance=balance, total_contributed=contributed, total_return=returned)
