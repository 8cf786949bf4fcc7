"""Helper functions for the plan evaluation engine."""

from datetime import date
from typing import Iterable

import pandas as pd

from usage.types import UsageRecord

USAGE_COLUMNS = ["date", "time", "kwh"]


def _records_to_dataframe(records: Iterable[UsageRecord]) -> pd.DataFrame:
    """
    Build a usage DataFrame from usage records.

    Returns:
        DataFrame with columns date (datetime64), time (HH:MM), kwh, plus the
        derived hour and weekday (0 = Sunday through 6 = Saturday) columns
    """
    usage = pd.DataFrame(
        [(record.date, record.time, record.kwh_usage) for record in records],
        columns=USAGE_COLUMNS,
    )
    usage["date"] = pd.to_datetime(usage["date"])
    usage["kwh"] = usage["kwh"].astype(float)
    usage["hour"] = usage["time"].str.split(":").str[0].astype(int)
    # pandas counts Monday as 0
    usage["weekday"] = (usage["date"].dt.dayofweek + 1) % 7
    return usage


def _count_calendar_months(start_date: date, end_date: date) -> int:
    """
    Number of calendar months between two dates, at least 1.

    Only the year and month are compared: Jan 31 -> Feb 1 counts as one month
    and Jan 1 -> Jan 31 is clamped to one.
    """
    months = (end_date.year - start_date.year) * 12 + (end_date.month - start_date.month)
    return max(1, months)


def _days_between(start_date: date, end_date: date) -> int:
    """Whole days from start_date to end_date."""
    return (end_date - start_date).days
