from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Phase(str, Enum):
    ACCUMULATING = "accumulating"
    DRAWING_DOWN = "drawing_down"
    DEPLETED = "depleted"
    COMPLETED = "completed"


class ScenarioInput(BaseModel):
    """Inputs for a single projection run. Rates are percentages (9.0 == 9%)."""

    model_config = ConfigDict(extra="forbid", frozen=True, allow_inf_nan=False)

    currentAge: int = Field(ge=0, le=120)
    retirementAge: int = Field(ge=1, le=120)
    lifeExpectancy: int = Field(ge=1, le=130)

    startingBalance: float = Field(ge=0)
    monthlyContribution: float = Field(ge=0)

    annualReturnPct: float = Field(gt=-100, le=100)
    inflationPct: float = Field(gt=-100, le=100)
    drawdownRatePct: float = Field(ge=0, le=100)

    # only read by the salary/tax display, never by the ledger
    grossAnnualIncome: Optional[float] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def ensure_validity(self) -> "ScenarioInput":
        if self.retirementAge <= self.currentAge:
            raise ValueError("retirementAge must be greater than currentAge")
        if self.lifeExpectancy < self.retirementAge:
            raise ValueError("lifeExpectancy must be at least retirementAge")
        return self

    @property
    def months_until_retirement(self) -> int:
        return (self.retirementAge - self.currentAge) * 12


class ProjectionRow(BaseModel):
    """One year of the ledger."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    period: int
    age: int
    year: int
    phase: Phase
    beginningBalance: float
    contribution: float
    investmentReturn: float
    withdrawal: float
    taxPaid: float
    netIncome: float
    endingBalance: float
    inflationAdjustedBalance: float


class Statistics(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    totalContributed: float
    projectedValueAtRetirement: float
    totalWithdrawn: float
    totalTaxPaid: float
    netAfterTaxIncome: float
    # None => the fund outlived the projection
    fundDepletionAge: Optional[int]
    wealthRetentionRatio: float
    effectiveTaxRate: float
    totalInvestmentReturns: float
    peakBalance: float
    peakBalanceAge: Optional[int]
    retirementDuration: int
    averageMonthlyIncome: float
