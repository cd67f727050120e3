"""Summary figures reduced from a projection ledger."""

from __future__ import annotations

from typing import Optional, Sequence

from planner.models import Phase, ProjectionRow, Statistics


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator > 0 else 0.0


def aggregate(rows: Sequence[ProjectionRow], total_contributed: float) -> Statistics:
    """
    Single pass over the ledger.

    total_contributed is supplied by the caller (starting balance plus the
    escalated contributions) because the ledger alone cannot tell a starting
    balance from growth.
    """
    total_withdrawn = 0.0
    total_tax = 0.0
    total_returns = 0.0
    retirement_years = 0
    value_at_retirement: Optional[float] = None
    depletion_age: Optional[int] = None
    peak_balance = 0.0
    peak_age: Optional[int] = None

    for row in rows:
        total_withdrawn += row.withdrawal
        total_tax += row.taxPaid
        total_returns += row.investmentReturn

        if row.phase is Phase.DRAWING_DOWN:
            retirement_years += 1
            if value_at_retirement is None:
                value_at_retirement = row.beginningBalance

        if depletion_age is None and row.endingBalance <= 0:
            depletion_age = row.age

        if peak_age is None or row.endingBalance > peak_balance:
            peak_balance = row.endingBalance
            peak_age = row.age

    if value_at_retirement is None:
        # never reached retirement; report where the ledger stopped
        value_at_retirement = rows[-1].endingBalance if rows else 0.0

    net_income = total_withdrawn - total_tax

    return Statistics(
        totalContributed=total_contributed,
        projectedValueAtRetirement=value_at_retirement,
        totalWithdrawn=total_withdrawn,
        totalTaxPaid=total_tax,
        netAfterTaxIncome=net_income,
        fundDepletionAge=depletion_age,
        wealthRetentionRatio=_ratio(net_income, total_contributed),
        effectiveTaxRate=_ratio(total_tax, total_withdrawn) * 100,
        totalInvestmentReturns=total_returns,
        peakBalance=peak_balance,
        peakBalanceAge=peak_age,
        retirementDuration=retirement_years,
        averageMonthlyIncome=_ratio(total_withdrawn, retirement_years) / 12,
    )
