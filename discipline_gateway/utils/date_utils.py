"""Date manipulation utilities"""

from datetime import datetime, timezone
from typing import List

SECONDS_PER_DAY = 86_400


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into an aware UTC datetime (naive input is treated as UTC)"""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def days_between(start: datetime, end: datetime) -> float:
    """Fractional number of days from start to end"""
    return (end - start).total_seconds() / SECONDS_PER_DAY


def day_gaps(timestamps: List[datetime]) -> List[float]:
    """Gaps in days between consecutive timestamps"""
    return [days_between(prev, curr) for prev, curr in zip(timestamps, timestamps[1:])]


def add_months(moment: datetime, months: int) -> datetime:
    """Shift by whole calendar months, keeping the day (caller keeps day <= 28)"""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    return moment.replace(year=year, month=month)
