from __future__ import annotations

from math import isclose

from planner.core.comparison import compare, headline
from planner.models import ScenarioInput


def scenario(**overrides) -> ScenarioInput:
    values = {
        "currentAge": 30,
        "retirementAge": 31,
        "lifeExpectancy": 85,
        "startingBalance": 0.0,
        "monthlyContribution": 1000.0,
        "annualReturnPct": 0.0,
        "inflationPct": 0.0,
        "drawdownRatePct": 4.0,
    }
    values.update(overrides)
    return ScenarioInput(**values)


def test_delta_of_extra_contributions():
    delta = compare(scenario(), scenario(monthlyContribution=2000.0))

    assert isclose(delta.nestEggDelta, 12000.0)
    assert isclose(delta.drawdownDelta, 12000.0 * 0.04 / 12)


def test_comparison_is_antisymmetric():
    baseline = scenario(currentAge=35, retirementAge=65, annualReturnPct=9.0, inflationPct=6.0)
    adjusted = scenario(
        currentAge=35,
        retirementAge=65,
        annualReturnPct=10.5,
        inflationPct=5.0,
        monthlyContribution=3500.0,
    )

    forward = compare(baseline, adjusted)
    backward = compare(adjusted, baseline)

    assert forward.nestEggDelta == -backward.nestEggDelta
    assert forward.drawdownDelta == -backward.drawdownDelta
    assert forward.nestEggDelta > 0


def test_identical_scenarios_have_no_delta():
    delta = compare(scenario(), scenario())

    assert delta.nestEggDelta == 0.0
    assert delta.drawdownDelta == 0.0


def test_headline_schedule_starts_at_retirement():
    figures = headline(scenario(currentAge=40, retirementAge=60, annualReturnPct=8.0), base_year=2025)

    assert figures.schedule[0].age == 60
    assert figures.schedule[0].year == 2045
    assert isclose(figures.schedule[0].beginningBalance, figures.nest_egg)
    assert isclose(figures.monthly_drawdown, figures.nest_egg * 0.04 / 12)
