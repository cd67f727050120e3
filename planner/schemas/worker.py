"""Message contracts for the background planner worker.

Requests carry a ``CALCULATE`` type; replies are a tagged union on ``type``
(``SUCCESS`` or ``ERROR``) echoing the request's sequence number.
"""

from __future__ import annotations

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

from planner.config import settings
from planner.models import ProjectionRow, ScenarioInput


class UserProfile(BaseModel):
    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    current_age: int = Field(..., ge=0, le=120)
    retirement_age: int = Field(..., ge=1, le=120)
    life_expectancy: int = Field(settings.default_life_expectancy, ge=1, le=130)
    gross_annual_income: float = Field(0.0, ge=0)
    current_retirement_savings: float = Field(0.0, ge=0)

    @model_validator(mode="after")
    def ensure_ages(self) -> "UserProfile":
        if self.retirement_age <= self.current_age:
            raise ValueError("retirement_age must be greater than current_age")
        if self.life_expectancy < self.retirement_age:
            raise ValueError("life_expectancy must be at least retirement_age")
        return self


class Adjustments(BaseModel):
    """Slider values; rates are percentages (9.0 == 9%)."""

    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    monthly_ra_contribution: float = Field(..., ge=0)
    investment_return: float = Field(..., gt=-100, le=100)
    inflation_rate: float = Field(..., gt=-100, le=100)
    drawdown_rate: float = Field(settings.default_drawdown_rate_pct, ge=0, le=100)


class WorkerInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    userProfile: UserProfile
    adjustments: Adjustments
    aiRecommendations: Adjustments

    def scenario(self, adjustments: Adjustments) -> ScenarioInput:
        profile = self.userProfile
        return ScenarioInput(
            currentAge=profile.current_age,
            retirementAge=profile.retirement_age,
            lifeExpectancy=profile.life_expectancy,
            startingBalance=profile.current_retirement_savings,
            monthlyContribution=adjustments.monthly_ra_contribution,
            annualReturnPct=adjustments.investment_return,
            inflationPct=adjustments.inflation_rate,
            drawdownRatePct=adjustments.drawdown_rate,
            grossAnnualIncome=profile.gross_annual_income,
        )


class ImpactSummary(BaseModel):
    retirementNestEggDelta: float
    monthlyDrawdownDelta: float


class Projections(BaseModel):
    retirementNestEgg: float
    monthlyDrawdown: float
    drawdownSchedule: List[ProjectionRow]


class WorkerOutput(BaseModel):
    impactSummary: ImpactSummary
    projections: Projections


class CalculateMessage(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: Literal["CALCULATE"] = "CALCULATE"
    sequence: int = Field(0, ge=0)
    payload: WorkerInput


class SuccessMessage(BaseModel):
    type: Literal["SUCCESS"] = "SUCCESS"
    sequence: int
    payload: WorkerOutput
    # milliseconds spent in the calculation
    calculationTime: float


class ErrorMessage(BaseModel):
    type: Literal["ERROR"] = "ERROR"
    sequence: Optional[int] = None
    payload: str


WorkerReply = Annotated[Union[SuccessMessage, ErrorMessage], Field(discriminator="type")]

reply_adapter: TypeAdapter = TypeAdapter(WorkerReply)
