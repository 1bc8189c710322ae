"""Unit tests for recommendation synthesis"""

import pytest
from discipline_gateway.domain.analysis import run_analysis
from discipline_gateway.domain.cost import peg_cost_basis
from discipline_gateway.domain.models import (
    CostResult,
    CostType,
    Priority,
    ResultStatus,
    ScoreComponents,
    ScoreResult,
)
from discipline_gateway.domain.rates import SyntheticRateModel
from discipline_gateway.domain.recommendation import (
    INSUFFICIENT_DATA_MESSAGE,
    format_currency,
    generate_recommendation,
    get_detailed_recommendation,
    get_primary_issue,
)


def make_cost(amount, cost_type=CostType.SAVED, count=4, currency="USD"):
    return CostResult(
        status=ResultStatus.COMPUTED,
        cost_or_saved_amount=amount,
        currency=currency,
        cost_type=cost_type,
        actual_cost=0.0,
        simulated_cost=0.0,
        conversion_count=count,
    )


def make_score(score=50, frequency=70, consistency=70, timing=70):
    return ScoreResult(
        status=ResultStatus.COMPUTED,
        score=score,
        explanation="",
        components=ScoreComponents(frequency_score=frequency, consistency_score=consistency, timing_score=timing),
    )


@pytest.mark.parametrize(
    "amount, currency, expected",
    [
        (1234.5, "USD", "$1,234.50"),
        (7.25, "EUR", "€7.25"),
        (0.0, "gbp", "£0.00"),
        (1000000.0, "CHF", "CHF 1,000,000.00"),
    ],
)
def test_format_currency(amount, currency, expected):
    assert format_currency(amount, currency) == expected


def test_primary_issue_is_weakest_component():
    assert get_primary_issue(ScoreComponents(80, 20, 30)) == "consistency"


def test_primary_issue_ties_prefer_frequency():
    assert get_primary_issue(ScoreComponents(10, 10, 10)) == "frequency"


def test_no_primary_issue_when_all_components_ok():
    assert get_primary_issue(ScoreComponents(40, 50, 100)) is None


def test_insufficient_data_message():
    result = generate_recommendation(make_cost(100.0, CostType.LOST, count=1), make_score())
    assert result.recommendation == INSUFFICIENT_DATA_MESSAGE


def test_already_excellent():
    result = generate_recommendation(make_cost(3.0), make_score(score=85))
    assert result.recommendation.startswith("You're already following excellent conversion habits!")


def test_loss_names_frequency_and_count():
    result = generate_recommendation(
        make_cost(12.5, CostType.LOST, count=9),
        make_score(frequency=15, consistency=100, timing=60),
    )
    assert "You convert too frequently (9 times)" in result.recommendation
    assert "$12.50" in result.recommendation


def test_loss_names_consistency():
    result = generate_recommendation(make_cost(20.0, CostType.LOST), make_score(consistency=10))
    assert result.recommendation.startswith("Your conversion amounts vary too much")


def test_loss_names_timing_in_eur():
    result = generate_recommendation(
        make_cost(7.25, CostType.LOST, currency="EUR"),
        make_score(timing=20),
    )
    assert result.recommendation.startswith("Your conversion timing is irregular")
    assert "€7.25" in result.recommendation


def test_loss_without_weak_component():
    result = generate_recommendation(make_cost(6.0, CostType.LOST), make_score())
    assert result.recommendation.startswith("Your conversion habits could be more disciplined.")
    assert "$6.00" in result.recommendation


def test_large_saving():
    result = generate_recommendation(make_cost(42.0), make_score(score=60))
    assert result.recommendation.startswith("Great job!")
    assert "approximately $42.00 in this period" in result.recommendation


@pytest.mark.parametrize("cost_type", [CostType.SAVED, CostType.LOST])
def test_small_amount(cost_type):
    result = generate_recommendation(make_cost(4.0, cost_type), make_score(score=50))
    assert result.recommendation.startswith("Your conversion habits are reasonably good.")


def test_large_saving_with_high_score_is_still_great_job():
    """The already-excellent rule only applies below 10"""
    result = generate_recommendation(make_cost(10.0), make_score(score=90))
    assert result.recommendation.startswith("Great job!")


def test_zero_amount_is_equivalent():
    result = generate_recommendation(make_cost(0.0), make_score(score=50))
    assert "roughly equivalent to following a disciplined monthly rule" in result.recommendation


def test_detailed_recommendation_frequency_is_high_priority():
    detailed = get_detailed_recommendation(make_cost(0.0), make_score(frequency=15))

    assert detailed.priority == Priority.HIGH
    assert len(detailed.actionable_tips) == 2
    assert "calendar reminder" in detailed.actionable_tips[0]


@pytest.mark.parametrize("components", [{"consistency": 25}, {"timing": 10}])
def test_detailed_recommendation_medium_priority(components):
    detailed = get_detailed_recommendation(make_cost(0.0), make_score(**components))

    assert detailed.priority == Priority.MEDIUM
    assert len(detailed.actionable_tips) == 2


def test_detailed_recommendation_default_tip():
    detailed = get_detailed_recommendation(make_cost(0.0), make_score())

    assert detailed.priority == Priority.LOW
    assert detailed.actionable_tips == ["Your discipline is good! Keep up the consistent approach."]
    assert detailed.recommendation == generate_recommendation(make_cost(0.0), make_score()).recommendation


def test_run_analysis_monthly_habit(make_conversions):
    conversions = make_conversions(
        ["2024-01-15T10:00:00Z", "2024-02-15T10:00:00Z", "2024-03-15T10:00:00Z", "2024-04-15T10:00:00Z"],
        amounts=[250.0] * 4,
    )

    report = run_analysis(conversions, 500.0, "USD", SyntheticRateModel(seed=42))

    assert report.simulation.target_day_of_month == 15
    assert len(report.simulation.simulated_conversions) == 4
    assert report.cost.cost_type == CostType.SAVED
    assert report.cost.cost_or_saved_amount == pytest.approx(0.0)
    assert report.score.score == 100
    assert report.recommendation.recommendation.startswith("You're already following excellent")
    assert report.detailed_recommendation.priority == Priority.LOW


def test_run_analysis_insufficient_data(make_conversions):
    report = run_analysis(make_conversions(["2024-01-15T10:00:00Z"]), 500.0)

    assert report.simulation.status == ResultStatus.INSUFFICIENT_DATA
    assert report.cost.status == ResultStatus.INSUFFICIENT_DATA
    assert report.score.status == ResultStatus.INSUFFICIENT_DATA
    assert report.recommendation.recommendation == INSUFFICIENT_DATA_MESSAGE


def test_run_analysis_cost_matches_reported_simulation(make_conversions):
    """Without a seed or cache the reported schedule is still the one the cost was computed on"""
    conversions = make_conversions(
        ["2024-01-05T10:00:00Z", "2024-02-17T10:00:00Z", "2024-03-05T10:00:00Z", "2024-04-29T10:00:00Z"],
        amounts=[80.0, 120.0, 100.0, 100.0],
    )

    report = run_analysis(conversions, 400.0, "USD", SyntheticRateModel(jitter=0.01))

    prices = [s.price_at_conversion for s in report.simulation.simulated_conversions]
    expected = peg_cost_basis(report.simulation.total_simulated_amount, sum(prices) / len(prices))
    assert report.cost.simulated_cost == pytest.approx(abs(expected))
