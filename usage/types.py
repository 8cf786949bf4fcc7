"""
Lightweight value types for parsed interval usage data.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from usage.exceptions import UsageDataError


@dataclass(frozen=True, slots=True)
class UsageRecord:
    """A single 15-minute consumption reading."""

    date: date
    time: str  # HH:MM
    kwh_usage: float

    @property
    def hour(self) -> int:
        return int(self.time.split(":")[0])

    @property
    def weekday(self) -> int:
        """Day of week with 0 = Sunday through 6 = Saturday."""
        return (self.date.weekday() + 1) % 7


@dataclass(frozen=True, slots=True)
class ParsedUsageData:
    """
    Interval usage data for one meter, with the metadata found in the export.

    Records are not guaranteed to be in chronological order. start_date and
    end_date are the min/max record dates and total_kwh is the exact sum of
    record usage.
    """

    customer_name: str
    address: str
    meter_code: str
    meter_number: str
    contract_number: str
    records: tuple[UsageRecord, ...]
    start_date: date
    end_date: date
    total_kwh: float

    @property
    def days_observed(self) -> int:
        return (self.end_date - self.start_date).days


@dataclass(frozen=True, slots=True)
class UsageResult:
    """Outcome of parsing or validating usage data: data on success, error otherwise."""

    data: Optional[ParsedUsageData] = None
    error: Optional[UsageDataError] = None

    @property
    def success(self) -> bool:
        return self.error is None and self.data is not None
