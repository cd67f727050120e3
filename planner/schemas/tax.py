"""Data contracts for the tax endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from planner.core.tax import TaxBracket, TaxPolicy


class IncomeTaxRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    income: float = Field(..., ge=0, description="Annual taxable income in Rand.")
    age: int = Field(..., ge=0, le=130)


class IncomeTaxResponse(BaseModel):
    income: float
    age: int
    grossTax: float
    rebate: float
    tax: float
    marginalRatePct: float
    effectiveRatePct: float
    taxFreeThreshold: float
    bracket: Optional[TaxBracket] = None
    unmatched: bool = False


class SalaryBreakdownRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    grossAnnualIncome: float = Field(..., ge=0)
    monthlyRaContribution: float = Field(0.0, ge=0)
    age: int = Field(..., ge=0, le=130)


class RaOptimizationRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    grossAnnualIncome: float = Field(..., ge=0)
    currentAnnualRaContribution: float = Field(0.0, ge=0)
    age: int = Field(..., ge=0, le=130)


class DrawdownStrategyRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    retirementBalance: float = Field(..., gt=0)
    desiredMonthlyIncome: float = Field(..., ge=0)
    yearsToPlan: int = Field(..., ge=1, le=100)
    inflationPct: float = Field(..., gt=-100, le=100)
    expectedReturnPct: float = Field(..., gt=-100, le=100)
    retirementAge: int = Field(65, ge=0, le=130)


class TaxTableResponse(BaseModel):
    taxYear: str
    source: str
    retrievedAt: datetime
    stale: bool
    policy: TaxPolicy
