"""Full analysis pipeline: simulate, price, score, recommend"""

from typing import List, Optional

from discipline_gateway.domain.cost import calculate_cost_savings
from discipline_gateway.domain.models import AnalysisReport, ConversionEvent
from discipline_gateway.domain.rates import RateProvider, SyntheticRateModel
from discipline_gateway.domain.recommendation import generate_recommendation, get_detailed_recommendation
from discipline_gateway.domain.scoring import calculate_discipline_score
from discipline_gateway.domain.simulation import simulate_discipline_rule


def run_analysis(
    conversions: List[ConversionEvent],
    current_balance: float,
    target_currency: str = "USD",
    rate_provider: Optional[RateProvider] = None,
) -> AnalysisReport:
    """
    Main entry point: produce every result for one wallet's conversions.

    All stages share one rate provider, and the cost is computed against the
    reported simulation. With fewer than 2 conversions every stage
    returns its insufficient-data result instead of raising.
    """
    if rate_provider is None:
        rate_provider = SyntheticRateModel()

    simulation = simulate_discipline_rule(conversions, current_balance, target_currency, rate_provider)
    cost = calculate_cost_savings(
        conversions,
        current_balance,
        target_currency,
        rate_provider,
        simulation=simulation,
    )
    score = calculate_discipline_score(conversions)

    return AnalysisReport(
        simulation=simulation,
        cost=cost,
        score=score,
        recommendation=generate_recommendation(cost, score),
        detailed_recommendation=get_detailed_recommendation(cost, score),
    )
