"""Cost/savings of actual conversions compared with the monthly discipline rule"""

from typing import List, Optional

from discipline_gateway.domain.models import (
    ConversionEvent,
    CostBreakdown,
    CostResult,
    CostType,
    PricedConversion,
    ResultStatus,
    SimulatedConversion,
    SimulationResult,
)
from discipline_gateway.domain.rates import RateProvider, SyntheticRateModel
from discipline_gateway.domain.simulation import simulate_discipline_rule


def peg_cost_basis(total_amount: float, average_rate: float) -> float:
    """What converting `total_amount` cost relative to a perfect $1.00 peg"""
    return total_amount * (1 - average_rate)


def calculate_cost_savings(
    actual_conversions: List[ConversionEvent],
    current_balance: float,
    target_currency: str,
    rate_provider: Optional[RateProvider] = None,
    simulation: Optional[SimulationResult] = None,
) -> CostResult:
    """
    Compare peg-deviation cost of actual conversions with the simulated rule.

    The simulated side reuses the prices the simulator already attached; the actual
    side is priced here with the same provider. Pass `simulation` to price against a
    rule run that was already computed for these conversions.

    Returns:
        CostResult where cost_type is SAVED when the simulated cost basis is at least
        the actual one (actual behaviour did no worse) and LOST otherwise.
    """
    if len(actual_conversions) < 2:
        return CostResult(
            status=ResultStatus.INSUFFICIENT_DATA,
            cost_or_saved_amount=0.0,
            currency=target_currency,
            cost_type=CostType.SAVED,
            actual_cost=0.0,
            simulated_cost=0.0,
            conversion_count=len(actual_conversions),
        )

    if rate_provider is None:
        rate_provider = SyntheticRateModel()

    if simulation is None:
        simulation = simulate_discipline_rule(
            actual_conversions,
            current_balance,
            target_currency,
            rate_provider=rate_provider,
        )

    actual_rates = [rate_provider.rate(c.timestamp, target_currency) for c in actual_conversions]
    avg_actual_rate = sum(actual_rates) / len(actual_rates)

    simulated_prices = [s.price_at_conversion for s in simulation.simulated_conversions]
    avg_simulated_rate = sum(simulated_prices) / len(simulated_prices) if simulated_prices else 1.0

    total_actual_amount = sum(c.amount for c in actual_conversions)

    actual_cost_basis = peg_cost_basis(total_actual_amount, avg_actual_rate)
    simulated_cost_basis = peg_cost_basis(simulation.total_simulated_amount, avg_simulated_rate)

    delta = simulated_cost_basis - actual_cost_basis

    return CostResult(
        status=ResultStatus.COMPUTED,
        cost_or_saved_amount=abs(delta),
        currency=target_currency,
        cost_type=CostType.SAVED if delta >= 0 else CostType.LOST,
        actual_cost=abs(actual_cost_basis),
        simulated_cost=abs(simulated_cost_basis),
        conversion_count=len(actual_conversions),
    )


def get_cost_breakdown(
    actual_conversions: List[ConversionEvent],
    simulated_conversions: List[SimulatedConversion],
    target_currency: str,
    rate_provider: Optional[RateProvider] = None,
) -> CostBreakdown:
    """Per-conversion rates and fiat values for both series"""
    if rate_provider is None:
        rate_provider = SyntheticRateModel()

    actual_priced = []
    for conversion in actual_conversions:
        rate = rate_provider.rate(conversion.timestamp, target_currency)
        actual_priced.append(
            PricedConversion(
                timestamp=conversion.timestamp,
                amount=conversion.amount,
                rate=rate,
                value_in_target=conversion.amount * rate,
            )
        )

    simulated_priced = [
        PricedConversion(
            timestamp=s.timestamp,
            amount=s.amount,
            rate=s.price_at_conversion,
            value_in_target=s.amount * s.price_at_conversion,
        )
        for s in simulated_conversions
    ]

    total_actual = sum(p.value_in_target for p in actual_priced)
    total_simulated = sum(p.value_in_target for p in simulated_priced)

    return CostBreakdown(
        actual_conversions_with_rates=actual_priced,
        simulated_conversions_with_rates=simulated_priced,
        total_actual_value=total_actual,
        total_simulated_value=total_simulated,
        difference=total_simulated - total_actual,
    )
