"""Conversion frequency detection and aggregate statistics"""

from datetime import datetime
from statistics import fmean, pstdev
from typing import Iterable, List, Optional

from discipline_gateway.domain.models import (
    ConversionEvent,
    FrequencyPattern,
    MissingTimestampPolicy,
    PatternSummary,
    RawTransfer,
    ResultStatus,
)
from discipline_gateway.domain.normalizer import parse_conversion_events
from discipline_gateway.utils.date_utils import day_gaps

# Coefficient of variation below which gaps count as a regular schedule
REGULARITY_CV_THRESHOLD = 0.3


def detect_frequency_pattern(conversions: List[ConversionEvent]) -> FrequencyPattern:
    """
    Classify conversion cadence from the gaps between consecutive events.

    Regular sequences (CV of gaps < 0.3) are bucketed by average gap:
    <= 2 days daily, <= 9 weekly, <= 16 bi-weekly, <= 35 monthly.
    Anything else, including regular gaps longer than 35 days, is irregular.
    """
    if len(conversions) < 2:
        return FrequencyPattern.INSUFFICIENT_DATA

    gaps = day_gaps([c.timestamp for c in conversions])
    avg_days = fmean(gaps)

    # All events at the same instant: no cadence to speak of
    if avg_days <= 0:
        return FrequencyPattern.IRREGULAR

    cv = pstdev(gaps) / avg_days

    if cv < REGULARITY_CV_THRESHOLD:
        if avg_days <= 2:
            return FrequencyPattern.DAILY
        if avg_days <= 9:
            return FrequencyPattern.WEEKLY
        if avg_days <= 16:
            return FrequencyPattern.BI_WEEKLY
        if avg_days <= 35:
            return FrequencyPattern.MONTHLY

    return FrequencyPattern.IRREGULAR


def calculate_average_days_between(conversions: List[ConversionEvent]) -> Optional[float]:
    """Mean gap in days between consecutive conversions, None with fewer than 2"""
    if len(conversions) < 2:
        return None
    return fmean(day_gaps([c.timestamp for c in conversions]))


def summarize_conversions(conversions: List[ConversionEvent], transfer_count: int = 0) -> PatternSummary:
    """Build the aggregate pattern summary for an ascending list of conversions"""
    total_conversions = len(conversions)
    total_volume = sum(c.amount for c in conversions)
    average_amount = total_volume / total_conversions if total_conversions > 0 else 0.0

    first_date: Optional[datetime] = conversions[0].timestamp if conversions else None
    last_date: Optional[datetime] = conversions[-1].timestamp if conversions else None

    return PatternSummary(
        status=ResultStatus.COMPUTED if total_conversions >= 2 else ResultStatus.INSUFFICIENT_DATA,
        conversions=list(conversions),
        total_conversions=total_conversions,
        frequency=detect_frequency_pattern(conversions),
        average_amount=average_amount,
        total_volume=total_volume,
        average_days_between_conversions=calculate_average_days_between(conversions),
        first_conversion_date=first_date,
        last_conversion_date=last_date,
        transfer_count=transfer_count,
    )


def analyze_transfers(
    transfers: Iterable[RawTransfer],
    wallet_address: str,
    policy: MissingTimestampPolicy = MissingTimestampPolicy.USE_CURRENT_TIME,
    now: Optional[datetime] = None,
) -> PatternSummary:
    """Main entry point: normalize raw transfers and summarize the conversion pattern"""
    transfers = list(transfers)
    conversions = parse_conversion_events(transfers, wallet_address, policy=policy, now=now)
    return summarize_conversions(conversions, transfer_count=len(transfers))
