"""HTTP routes for the Flask API."""

import logging
from http import HTTPStatus
from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from planner.core.comparison import compare
from planner.core.drawdown import drawdown_strategy
from planner.core.ping import get_ping_message
from planner.core.projection import run_projection
from planner.core.salary import optimize_ra_contribution, salary_breakdown
from planner.core.tax import TaxPolicy, assess_income_tax, marginal_rate, tax_free_threshold
from planner.domain.tax_tables import TaxTableRecord
from planner.domain.worker import handle_message
from planner.schemas.ping import PingResponse
from planner.schemas.projection import (
    CompareRequest,
    CompareResponse,
    ProjectionRequest,
    ProjectionResponse,
)
from planner.schemas.tax import (
    DrawdownStrategyRequest,
    IncomeTaxRequest,
    IncomeTaxResponse,
    RaOptimizationRequest,
    SalaryBreakdownRequest,
    TaxTableResponse,
)
from planner.schemas.worker import ErrorMessage

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)


@api_bp.errorhandler(ValidationError)
def _handle_validation_error(exc: ValidationError):
    """Convert Pydantic validation errors into JSON responses."""
    logger.info("rejected %s payload: %d error(s)", request.path, exc.error_count())
    return jsonify({"detail": exc.errors(include_url=False, include_context=False)}), HTTPStatus.UNPROCESSABLE_ENTITY


def _payload() -> Dict[str, Any]:
    return request.get_json(force=True, silent=False)


def _tax_tables() -> TaxTableRecord:
    return current_app.config["TAX_TABLES"].current()


def _policy() -> TaxPolicy:
    return _tax_tables().policy


@api_bp.get("/ping")
def ping() -> Any:
    """Health-check endpoint."""
    response = PingResponse(message=get_ping_message())
    return jsonify(response.model_dump())


@api_bp.post("/projection")
def projection() -> Any:
    """Full-lifecycle ledger plus summary statistics."""
    scenario = ProjectionRequest.model_validate(_payload())
    result = run_projection(scenario, _policy())
    response = ProjectionResponse.model_validate(result.model_dump())
    return jsonify(response.model_dump(mode="json"))


@api_bp.post("/projection/compare")
def projection_compare() -> Any:
    payload = CompareRequest.model_validate(_payload())
    delta = compare(payload.baseline, payload.adjusted, _policy())
    return jsonify(CompareResponse.model_validate(delta.model_dump()).model_dump())


@api_bp.post("/planner/calculate")
def planner_calculate() -> Any:
    """Run one worker message synchronously; ERROR replies map to 400."""
    reply = handle_message(_payload(), _policy())
    status = HTTPStatus.BAD_REQUEST if isinstance(reply, ErrorMessage) else HTTPStatus.OK
    return jsonify(reply.model_dump(mode="json")), status


@api_bp.post("/tax/income")
def income_tax() -> Any:
    payload = IncomeTaxRequest.model_validate(_payload())
    policy = _policy()
    assessment = assess_income_tax(payload.income, payload.age, policy)
    response = IncomeTaxResponse(
        income=payload.income,
        age=payload.age,
        grossTax=assessment.grossTax,
        rebate=assessment.rebate,
        tax=assessment.tax,
        marginalRatePct=marginal_rate(payload.income, payload.age, policy),
        effectiveRatePct=assessment.tax / payload.income * 100 if payload.income > 0 else 0.0,
        taxFreeThreshold=tax_free_threshold(payload.age, policy),
        bracket=assessment.bracket,
        unmatched=assessment.unmatched,
    )
    return jsonify(response.model_dump())


@api_bp.post("/tax/salary-breakdown")
def tax_salary_breakdown() -> Any:
    payload = SalaryBreakdownRequest.model_validate(_payload())
    result = salary_breakdown(
        payload.grossAnnualIncome,
        payload.monthlyRaContribution,
        payload.age,
        _policy(),
    )
    return jsonify(result.model_dump())


@api_bp.post("/tax/ra-optimization")
def tax_ra_optimization() -> Any:
    payload = RaOptimizationRequest.model_validate(_payload())
    result = optimize_ra_contribution(
        payload.grossAnnualIncome,
        payload.currentAnnualRaContribution,
        payload.age,
        _policy(),
    )
    return jsonify(result.model_dump())


@api_bp.post("/drawdown/strategy")
def drawdown_strategy_endpoint() -> Any:
    payload = DrawdownStrategyRequest.model_validate(_payload())
    result = drawdown_strategy(
        payload.retirementBalance,
        payload.desiredMonthlyIncome,
        payload.yearsToPlan,
        payload.inflationPct,
        payload.expectedReturnPct,
        retirement_age=payload.retirementAge,
        policy=_policy(),
    )
    return jsonify(result.model_dump())


@api_bp.get("/tax/tables")
def tax_tables() -> Any:
    record = _tax_tables()
    settings = current_app.config["PLANNER_SETTINGS"]
    response = TaxTableResponse(
        taxYear=record.taxYear,
        source=record.source,
        retrievedAt=record.retrievedAt,
        stale=record.is_stale(settings.tax_table_ttl_days),
        policy=record.policy,
    )
    return jsonify(response.model_dump(mode="json"))
