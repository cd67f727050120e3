"""Closed-form helpers shared by the models. Rates are percentages (8.0 == 8%)."""

from __future__ import annotations


def monthly_rate(annual_rate_pct: float) -> float:
    return annual_rate_pct / 100 / 12


def escalation_factor(rate_pct: float, years: int) -> float:
    return (1 + rate_pct / 100) ** years


def future_value(
    present_value: float,
    monthly_payment: float,
    annual_return_pct: float,
    months: int,
) -> float:
    """
    FV of a starting balance plus level end-of-month payments:
      PV * (1 + r)^n + PMT * ((1 + r)^n - 1) / r

    Falls back to the linear sum when r == 0 instead of dividing by zero.
    """
    if months <= 0:
        return present_value
    r = monthly_rate(annual_return_pct)
    if r == 0:
        return present_value + monthly_payment * months
    growth = (1 + r) ** months
    return present_value * growth + monthly_payment * (growth - 1) / r


def present_value(future_amount: float, inflation_pct: float, years: float) -> float:
    """Deflate a nominal amount back to today's Rand."""
    if years <= 0:
        return future_amount
    return future_amount / (1 + inflation_pct / 100) ** years


def real_return(nominal_pct: float, inflation_pct: float) -> float:
    # Fisher relation, in percent
    return ((1 + nominal_pct / 100) / (1 + inflation_pct / 100) - 1) * 100


def nominal_return(real_pct: float, inflation_pct: float) -> float:
    return ((1 + real_pct / 100) * (1 + inflation_pct / 100) - 1) * 100
