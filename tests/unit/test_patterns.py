"""Unit tests for frequency pattern detection"""

import pytest
from datetime import datetime, timedelta, timezone
from discipline_gateway.domain.models import FrequencyPattern, ResultStatus
from discipline_gateway.domain.patterns import (
    analyze_transfers,
    calculate_average_days_between,
    detect_frequency_pattern,
    summarize_conversions,
)

START = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


def _spaced(make_conversions, gaps):
    """Conversions starting at START separated by the given day gaps"""
    moments = [START]
    for gap in gaps:
        moments.append(moments[-1] + timedelta(days=gap))
    return make_conversions([m.isoformat() for m in moments])


@pytest.mark.parametrize(
    "gap_days, expected",
    [
        (1, FrequencyPattern.DAILY),
        (7, FrequencyPattern.WEEKLY),
        (14, FrequencyPattern.BI_WEEKLY),
        (30, FrequencyPattern.MONTHLY),
    ],
)
def test_regular_spacing_buckets(make_conversions, gap_days, expected):
    """Evenly spaced conversions land in the bucket for their gap"""
    conversions = _spaced(make_conversions, [gap_days] * 4)
    assert detect_frequency_pattern(conversions) == expected


def test_highly_variable_gaps_are_irregular(make_conversions):
    conversions = _spaced(make_conversions, [1, 40, 3, 55])
    assert detect_frequency_pattern(conversions) == FrequencyPattern.IRREGULAR


def test_regular_but_longer_than_monthly_is_irregular(make_conversions):
    conversions = _spaced(make_conversions, [60, 60, 60])
    assert detect_frequency_pattern(conversions) == FrequencyPattern.IRREGULAR


def test_same_instant_conversions_are_irregular(make_conversions):
    """Zero mean gap must not divide by zero"""
    conversions = make_conversions(["2024-01-01T00:00:00Z"] * 3)
    assert detect_frequency_pattern(conversions) == FrequencyPattern.IRREGULAR


def test_small_jitter_still_regular(make_conversions):
    """CV below 0.3 is still a regular schedule"""
    conversions = _spaced(make_conversions, [29, 31, 30, 32])
    assert detect_frequency_pattern(conversions) == FrequencyPattern.MONTHLY


@pytest.mark.parametrize("count", [0, 1])
def test_insufficient_data(make_conversions, count):
    conversions = make_conversions(["2024-01-01T00:00:00Z"] * count)

    assert detect_frequency_pattern(conversions) == FrequencyPattern.INSUFFICIENT_DATA
    assert calculate_average_days_between(conversions) is None

    summary = summarize_conversions(conversions)
    assert summary.status == ResultStatus.INSUFFICIENT_DATA
    assert summary.frequency == FrequencyPattern.INSUFFICIENT_DATA
    assert summary.average_days_between_conversions is None


def test_average_days_between(make_conversions):
    conversions = _spaced(make_conversions, [10, 20])
    assert calculate_average_days_between(conversions) == pytest.approx(15.0)


def test_summary_aggregates(make_conversions):
    conversions = make_conversions(
        ["2024-01-01T00:00:00Z", "2024-01-31T00:00:00Z", "2024-03-01T00:00:00Z"],
        amounts=[100.0, 200.0, 300.0],
    )

    summary = summarize_conversions(conversions, transfer_count=7)

    assert summary.status == ResultStatus.COMPUTED
    assert summary.total_conversions == 3
    assert summary.total_volume == 600.0
    assert summary.average_amount == 200.0
    assert summary.transfer_count == 7
    assert summary.first_conversion_date == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert summary.last_conversion_date == datetime(2024, 3, 1, tzinfo=timezone.utc)
    assert summary.frequency == FrequencyPattern.MONTHLY


def test_empty_summary_has_no_dates():
    summary = summarize_conversions([])

    assert summary.total_conversions == 0
    assert summary.average_amount == 0.0
    assert summary.first_conversion_date is None
    assert summary.last_conversion_date is None


def test_analyze_transfers_counts_all_transfers(monthly_transfers, wallet_address):
    """transfer_count includes incoming transfers; conversions only outbound"""
    summary = analyze_transfers(monthly_transfers, wallet_address)

    assert summary.transfer_count == 5
    assert summary.total_conversions == 4
    assert summary.total_volume == 1000.0
    assert summary.frequency == FrequencyPattern.MONTHLY
    assert [c.hash for c in summary.conversions] == ["0xa", "0xb", "0xc", "0xd"]


def test_detector_is_idempotent(make_conversions):
    conversions = _spaced(make_conversions, [3, 17, 9, 30])

    first = summarize_conversions(conversions)
    second = summarize_conversions(conversions)

    assert first == second
