"""Discipline scoring engine - how closely actual conversions follow a monthly habit"""

import math
from statistics import fmean, pstdev
from typing import List

from discipline_gateway.domain.models import (
    ConversionEvent,
    ResultStatus,
    ScoreCategory,
    ScoreComponents,
    ScoreResult,
)
from discipline_gateway.domain.simulation import MONTHLY_DAYS, most_common_day_of_month
from discipline_gateway.utils.date_utils import day_gaps

FREQUENCY_WEIGHT = 0.4
CONSISTENCY_WEIGHT = 0.3
TIMING_WEIGHT = 0.3

TIMING_TOLERANCE_DAYS = 3

INSUFFICIENT_DATA_EXPLANATION = (
    "Insufficient conversion data to calculate a meaningful score. "
    "At least 2 conversions are required."
)


def calculate_frequency_score(conversions: List[ConversionEvent]) -> int:
    """
    Score how close the average gap is to 30 days.

    Deviation bands: <=2 → 100, <=5 → 85, <=10 → 70, <=15 → 50, <=20 → 30, else 15
    """
    if len(conversions) < 2:
        return 0

    avg_days = fmean(day_gaps([c.timestamp for c in conversions]))
    deviation = abs(avg_days - MONTHLY_DAYS)

    if deviation <= 2:
        return 100
    elif deviation <= 5:
        return 85
    elif deviation <= 10:
        return 70
    elif deviation <= 15:
        return 50
    elif deviation <= 20:
        return 30
    else:
        return 15


def calculate_consistency_score(conversions: List[ConversionEvent]) -> int:
    """
    Score amount consistency by coefficient of variation.

    CV bands: <0.10 → 100, <0.25 → 75, <0.40 → 50, <0.60 → 25, else 10.
    A zero mean amount scores 0.
    """
    if len(conversions) < 2:
        return 0

    amounts = [c.amount for c in conversions]
    mean = fmean(amounts)
    if mean == 0:
        return 0

    cv = pstdev(amounts) / mean

    if cv < 0.10:
        return 100
    elif cv < 0.25:
        return 75
    elif cv < 0.40:
        return 50
    elif cv < 0.60:
        return 25
    else:
        return 10


def calculate_timing_score(conversions: List[ConversionEvent]) -> int:
    """
    Score how often conversions land within 3 days of the usual day of month.

    Day distance wraps at month end (the 1st and the 30th are 1 day apart).
    Share bands: >=0.9 → 100, >=0.75 → 80, >=0.6 → 60, >=0.4 → 40, >=0.25 → 20, else 10
    """
    if len(conversions) < 2:
        return 0

    target_day = most_common_day_of_month(conversions)

    on_target = 0
    for conversion in conversions:
        diff = abs(conversion.timestamp.day - target_day)
        if min(diff, 31 - diff) <= TIMING_TOLERANCE_DAYS:
            on_target += 1

    share = on_target / len(conversions)

    if share >= 0.9:
        return 100
    elif share >= 0.75:
        return 80
    elif share >= 0.6:
        return 60
    elif share >= 0.4:
        return 40
    elif share >= 0.25:
        return 20
    else:
        return 10


def generate_explanation(frequency_score: int, consistency_score: int, timing_score: int) -> str:
    """One sentence per component, picked by score band"""
    parts = []

    if frequency_score >= 80:
        parts.append("Your conversion frequency is excellent, closely matching a monthly pattern.")
    elif frequency_score >= 50:
        parts.append("Your conversion frequency is reasonably consistent but could be more regular.")
    elif frequency_score >= 25:
        parts.append("Your conversion frequency is irregular. Consider establishing a monthly habit.")
    else:
        parts.append("Your conversion frequency is very erratic. A consistent monthly schedule would help.")

    if consistency_score >= 80:
        parts.append("Conversion amounts are very consistent.")
    elif consistency_score >= 50:
        parts.append("Conversion amounts vary somewhat but follow a pattern.")
    elif consistency_score >= 25:
        parts.append("Conversion amounts are inconsistent. Consider setting a fixed percentage.")
    else:
        parts.append("Conversion amounts vary significantly. A fixed percentage would improve discipline.")

    if timing_score >= 80:
        parts.append("You convert on very consistent dates each month.")
    elif timing_score >= 50:
        parts.append("Your conversion timing is somewhat predictable.")
    elif timing_score >= 25:
        parts.append("Conversion timing is unpredictable. Pick a specific day each month.")
    else:
        parts.append("Conversion timing appears random. Choose a fixed date for conversions.")

    return " ".join(parts)


def calculate_discipline_score(conversions: List[ConversionEvent]) -> ScoreResult:
    """
    Main entry point: overall 0-100 discipline score for actual conversions.

    Weights: 40% frequency, 30% amount consistency, 30% timing.
    """
    if len(conversions) < 2:
        return ScoreResult(
            status=ResultStatus.INSUFFICIENT_DATA,
            score=0,
            explanation=INSUFFICIENT_DATA_EXPLANATION,
            components=ScoreComponents(frequency_score=0, consistency_score=0, timing_score=0),
        )

    frequency_score = calculate_frequency_score(conversions)
    consistency_score = calculate_consistency_score(conversions)
    timing_score = calculate_timing_score(conversions)

    weighted = (
        frequency_score * FREQUENCY_WEIGHT
        + consistency_score * CONSISTENCY_WEIGHT
        + timing_score * TIMING_WEIGHT
    )

    return ScoreResult(
        status=ResultStatus.COMPUTED,
        score=math.floor(weighted + 0.5),  # round half up
        explanation=generate_explanation(frequency_score, consistency_score, timing_score),
        components=ScoreComponents(
            frequency_score=frequency_score,
            consistency_score=consistency_score,
            timing_score=timing_score,
        ),
    )


def get_score_category(score: int) -> ScoreCategory:
    """Display label and colour for a score"""
    if score >= 80:
        return ScoreCategory(label="Excellent", color="green")
    elif score >= 60:
        return ScoreCategory(label="Good", color="blue")
    elif score >= 40:
        return ScoreCategory(label="Fair", color="yellow")
    elif score >= 20:
        return ScoreCategory(label="Poor", color="orange")
    else:
        return ScoreCategory(label="Needs Work", color="red")
