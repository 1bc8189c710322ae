"""Monthly discipline rule simulator - the counterfactual the user is compared against"""

from collections import Counter
from datetime import datetime
from statistics import fmean
from typing import List, Optional

from discipline_gateway.domain.models import (
    ConversionEvent,
    ResultStatus,
    SimulatedConversion,
    SimulationComparison,
    SimulationResult,
)
from discipline_gateway.domain.rates import RateProvider, SyntheticRateModel
from discipline_gateway.utils.date_utils import add_months, day_gaps

MIN_CONVERSION_PERCENTAGE = 0.10
MAX_CONVERSION_PERCENTAGE = 0.90
DEFAULT_CONVERSION_PERCENTAGE = 0.5
MAX_TARGET_DAY = 28  # every month has a 28th
MONTHLY_DAYS = 30


def calculate_conversion_percentage(conversions: List[ConversionEvent], current_balance: float) -> float:
    """
    Share of the balance an average conversion represents, clamped to 10%-90%.

    Falls back to 50% when there is no history or no positive balance.
    """
    if not conversions or current_balance <= 0:
        return DEFAULT_CONVERSION_PERCENTAGE

    average_conversion = sum(c.amount for c in conversions) / len(conversions)
    percentage = average_conversion / current_balance
    return max(MIN_CONVERSION_PERCENTAGE, min(MAX_CONVERSION_PERCENTAGE, percentage))


def most_common_day_of_month(conversions: List[ConversionEvent]) -> int:
    """Most frequent UTC day-of-month; ties go to the smallest day"""
    counts = Counter(c.timestamp.day for c in conversions)
    top = max(counts.values())
    return min(day for day, count in counts.items() if count == top)


def determine_target_day_of_month(conversions: List[ConversionEvent]) -> int:
    if not conversions:
        return 1
    return max(1, min(MAX_TARGET_DAY, most_common_day_of_month(conversions)))


def generate_monthly_conversion_dates(
    first_conversion: datetime,
    last_conversion: datetime,
    target_day_of_month: int,
) -> List[datetime]:
    """
    One date per month on the target day, between the first and last conversion.

    Starts in the first conversion's month (keeping its time of day), or the month
    after when the target day already passed.
    """
    current = first_conversion.replace(day=target_day_of_month)
    if current < first_conversion:
        current = add_months(current, 1)

    dates = []
    while current <= last_conversion:
        dates.append(current)
        current = add_months(current, 1)
    return dates


def simulate_discipline_rule(
    conversions: List[ConversionEvent],
    current_balance: float,
    target_currency: str = "USD",
    rate_provider: Optional[RateProvider] = None,
) -> SimulationResult:
    """
    Simulate converting a fixed share of the balance on a fixed day every month.

    Parameters are derived from actual behaviour:
    - percentage: average conversion relative to the current balance
    - day of month: the day the user converted on most often

    Each simulated conversion moves `current_balance * percentage`; the balance is not
    depleted between months. Prices come from `rate_provider` (synthetic by default).
    """
    if len(conversions) < 2:
        return SimulationResult(
            status=ResultStatus.INSUFFICIENT_DATA,
            simulated_conversions=[],
            conversion_percentage=0.0,
            target_day_of_month=0,
            total_simulated_amount=0.0,
            average_simulated_amount=0.0,
        )

    if rate_provider is None:
        rate_provider = SyntheticRateModel()

    sorted_conversions = sorted(conversions, key=lambda c: c.timestamp)
    conversion_percentage = calculate_conversion_percentage(sorted_conversions, current_balance)
    target_day = determine_target_day_of_month(sorted_conversions)

    monthly_dates = generate_monthly_conversion_dates(
        sorted_conversions[0].timestamp,
        sorted_conversions[-1].timestamp,
        target_day,
    )

    amount_to_convert = current_balance * conversion_percentage
    simulated = [
        SimulatedConversion(
            timestamp=moment,
            amount=amount_to_convert,
            price_at_conversion=rate_provider.rate(moment, target_currency),
            converted_to=target_currency,
        )
        for moment in monthly_dates
    ]

    total_simulated = sum(s.amount for s in simulated)

    return SimulationResult(
        status=ResultStatus.COMPUTED,
        simulated_conversions=simulated,
        conversion_percentage=conversion_percentage,
        target_day_of_month=target_day,
        total_simulated_amount=total_simulated,
        average_simulated_amount=total_simulated / len(simulated) if simulated else 0.0,
    )


def compare_simulation(
    actual_conversions: List[ConversionEvent],
    simulated_conversions: List[SimulatedConversion],
) -> SimulationComparison:
    """Side-by-side counts and totals, plus how far actual cadence is from monthly"""
    average_gap = fmean(day_gaps([c.timestamp for c in actual_conversions])) if len(actual_conversions) > 1 else 0.0

    return SimulationComparison(
        actual_count=len(actual_conversions),
        simulated_count=len(simulated_conversions),
        actual_total=sum(c.amount for c in actual_conversions),
        simulated_total=sum(s.amount for s in simulated_conversions),
        frequency_difference=abs(average_gap - MONTHLY_DAYS),
    )
