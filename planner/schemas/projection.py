"""Data contracts for the projection endpoints."""

from typing import List

from pydantic import BaseModel, ConfigDict

from planner.core.comparison import ScenarioDelta
from planner.models import Phase, ProjectionRow, ScenarioInput, Statistics


class ProjectionRequest(ScenarioInput):
    """Scenario to project; identical to ScenarioInput on the wire."""


class ProjectionResponse(BaseModel):
    rows: List[ProjectionRow]
    statistics: Statistics
    finalPhase: Phase
    truncated: bool = False


class CompareRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    baseline: ScenarioInput
    adjusted: ScenarioInput


class CompareResponse(ScenarioDelta):
    pass
