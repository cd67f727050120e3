from __future__ import annotations

from math import isclose

from flask.testing import FlaskClient

from planner.schemas.worker import SuccessMessage, reply_adapter


def projection_payload() -> dict:
    return {
        "currentAge": 35,
        "retirementAge": 65,
        "lifeExpectancy": 90,
        "startingBalance": 100000,
        "monthlyContribution": 5000,
        "annualReturnPct": 10.0,
        "inflationPct": 6.0,
        "drawdownRatePct": 4.0,
    }


def worker_message() -> dict:
    adjustments = {"monthly_ra_contribution": 5000, "investment_return": 9.0, "inflation_rate": 6.0}
    return {
        "type": "CALCULATE",
        "sequence": 4,
        "payload": {
            "userProfile": {
                "current_age": 35,
                "retirement_age": 65,
                "life_expectancy": 90,
                "gross_annual_income": 600000,
                "current_retirement_savings": 100000,
            },
            "adjustments": dict(adjustments, monthly_ra_contribution=7000),
            "aiRecommendations": adjustments,
        },
    }


def test_projection_endpoint_returns_rows_and_statistics(client: FlaskClient):
    resp = client.post("/api/projection", json=projection_payload())

    assert resp.status_code == 200
    body = resp.get_json()
    rows = body["rows"]
    assert rows, "response should include at least one projection row"
    assert rows[0]["age"] == 35
    assert rows[0]["phase"] == "accumulating"
    assert rows[-1]["age"] <= 90
    assert body["finalPhase"] in ("completed", "depleted")
    assert body["truncated"] is False
    assert body["statistics"]["totalContributed"] > 100000

    retirement_rows = [row for row in rows if row["age"] == 65]
    assert retirement_rows and retirement_rows[0]["phase"] == "drawing_down"
    assert retirement_rows[0]["withdrawal"] > 0


def test_invalid_projection_payload_returns_422(client: FlaskClient):
    payload = projection_payload()
    payload["startingBalance"] = -5

    resp = client.post("/api/projection", json=payload)

    assert resp.status_code == 422
    detail = resp.get_json()["detail"]
    assert detail[0]["loc"] == ["startingBalance"]


def test_infinite_balance_returns_422(client: FlaskClient):
    payload = projection_payload()
    payload["startingBalance"] = float("inf")

    resp = client.post("/api/projection", json=payload)

    assert resp.status_code == 422
    assert resp.get_json()["detail"][0]["loc"] == ["startingBalance"]


def test_inconsistent_ages_return_422(client: FlaskClient):
    payload = projection_payload()
    payload["retirementAge"] = 30

    resp = client.post("/api/projection", json=payload)

    assert resp.status_code == 422
    assert "retirementAge must be greater than currentAge" in resp.get_json()["detail"][0]["msg"]


def test_compare_endpoint(client: FlaskClient):
    adjusted = dict(projection_payload(), monthlyContribution=6000)

    resp = client.post("/api/projection/compare", json={"baseline": projection_payload(), "adjusted": adjusted})

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["nestEggDelta"] > 0
    assert body["drawdownDelta"] > 0


def test_planner_calculate_success(client: FlaskClient):
    resp = client.post("/api/planner/calculate", json=worker_message())

    assert resp.status_code == 200
    reply = reply_adapter.validate_python(resp.get_json())
    assert isinstance(reply, SuccessMessage)
    assert reply.sequence == 4
    assert reply.payload.impactSummary.retirementNestEggDelta > 0
    assert reply.payload.projections.drawdownSchedule[0].age == 65


def test_planner_calculate_error_returns_400(client: FlaskClient):
    message = worker_message()
    del message["payload"]["userProfile"]

    resp = client.post("/api/planner/calculate", json=message)

    assert resp.status_code == 400
    body = resp.get_json()
    assert body["type"] == "ERROR"
    assert body["sequence"] == 4
    assert "payload" in body and isinstance(body["payload"], str)


def test_income_tax_endpoint(client: FlaskClient):
    resp = client.post("/api/tax/income", json={"income": 200000, "age": 60})

    assert resp.status_code == 200
    body = resp.get_json()
    assert isclose(body["tax"], 18765.0)
    assert isclose(body["grossTax"], 36000.0)
    assert isclose(body["rebate"], 17235.0)
    assert isclose(body["marginalRatePct"], 18.0)
    assert body["bracket"]["min"] == 0
    assert body["unmatched"] is False


def test_salary_breakdown_endpoint(client: FlaskClient):
    resp = client.post(
        "/api/tax/salary-breakdown",
        json={"grossAnnualIncome": 600000, "monthlyRaContribution": 5000, "age": 40},
    )

    assert resp.status_code == 200
    assert isclose(resp.get_json()["monthlyTaxSavings"], 1800.0)


def test_ra_optimization_endpoint(client: FlaskClient):
    resp = client.post(
        "/api/tax/ra-optimization",
        json={"grossAnnualIncome": 2000000, "currentAnnualRaContribution": 100000, "age": 45},
    )

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["regulatoryLimits"]["limitType"] == "R350000_cap"
    assert body["recommendedRaContribution"] == 350000
    assert body["taxSavings"] > 0


def test_drawdown_strategy_endpoint(client: FlaskClient):
    resp = client.post(
        "/api/drawdown/strategy",
        json={
            "retirementBalance": 1000000,
            "desiredMonthlyIncome": 20000,
            "yearsToPlan": 30,
            "inflationPct": 5.0,
            "expectedReturnPct": 5.0,
        },
    )

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["sustainable"] is False
    assert len(body["alternatives"]) == 2


def test_unknown_field_is_rejected(client: FlaskClient):
    resp = client.post("/api/tax/income", json={"income": 1000, "age": 40, "province": "WC"})

    assert resp.status_code == 422


def test_tax_tables_endpoint(client: FlaskClient):
    resp = client.get("/api/tax/tables")

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["taxYear"] == "2025/26"
    assert body["source"] == "fallback"
    assert body["stale"] is False
    assert len(body["policy"]["brackets"]) == 7
    assert body["policy"]["brackets"][-1]["max"] is None
