"""
Shared fixtures for billing tests.

Builds synthetic usage data and a small plan catalog covering every discount
shape.
"""

import math
from datetime import date, timedelta

import numpy as np
import pandas as pd
import pytest

from billing.core.types import (
    ALL_DAYS,
    WEEKDAYS,
    BillTier,
    BillTieredPlan,
    DiscountWindow,
    FlatPlan,
    PlanCatalog,
    TimeOfUsePlan,
)
from usage.types import ParsedUsageData, UsageRecord

BASE_RATE = 0.5451
VAT_RATE = 0.18


def make_usage_data(records: list[UsageRecord]) -> ParsedUsageData:
    """Wrap records in ParsedUsageData, deriving dates and totals."""
    dates = [record.date for record in records]
    return ParsedUsageData(
        customer_name="Test Customer",
        address="1 Test St",
        meter_code="123",
        meter_number="87654321",
        contract_number="555000",
        records=tuple(records),
        start_date=min(dates),
        end_date=max(dates),
        total_kwh=sum(record.kwh_usage for record in records),
    )


@pytest.fixture
def usage_factory():
    """Factory fixture for ParsedUsageData on a regular interval grid.

    Args (of the returned function):
        start: first day (2024-01-07 is a Sunday)
        days: number of whole days to generate
        kwh: usage of every interval; ignored when seed is given
        freq: pandas frequency string for the interval length
        seed: when given, usage is drawn uniformly from 0.05-1.0 kWh
    """

    def _create_usage(
        start: date = date(2024, 1, 7),
        days: int = 7,
        kwh: float = 0.25,
        freq: str = "15min",
        seed: int | None = None,
    ) -> ParsedUsageData:
        index = pd.date_range(
            start=pd.Timestamp(start),
            end=pd.Timestamp(start + timedelta(days=days)),
            freq=freq,
            inclusive="left",
        )
        if seed is not None:
            values = np.round(np.random.default_rng(seed).uniform(0.05, 1.0, len(index)), 3)
        else:
            values = np.full(len(index), kwh)

        records = [
            UsageRecord(date=ts.date(), time=ts.strftime("%H:%M"), kwh_usage=float(value))
            for ts, value in zip(index, values)
        ]
        return make_usage_data(records)

    return _create_usage


@pytest.fixture
def flat_plan():
    """7% off at all times, no smart meter needed."""
    return FlatPlan(id="flat-7", provider="Flat Co", discount=0.07)


@pytest.fixture
def night_plan():
    """20% off 23:00-07:00 every day."""
    return TimeOfUsePlan(
        id="night-20",
        provider="Night Co",
        requires_smart_meter=True,
        windows=(DiscountWindow(days=ALL_DAYS, start_hour=23, end_hour=7, discount=0.20),),
    )


@pytest.fixture
def day_plan():
    """15% off 07:00-17:00 on weekdays."""
    return TimeOfUsePlan(
        id="day-15",
        provider="Day Co",
        requires_smart_meter=True,
        windows=(DiscountWindow(days=WEEKDAYS, start_hour=7, end_hour=17, discount=0.15),),
    )


@pytest.fixture
def tiered_plan():
    """Discount shrinks as the monthly bill grows."""
    return BillTieredPlan(
        id="tiered",
        provider="Tier Co",
        bill_tiers=(
            BillTier(max_bill=149, discount=0.10),
            BillTier(max_bill=199, discount=0.08),
            BillTier(max_bill=299, discount=0.06),
            BillTier(max_bill=math.inf, discount=0.05),
        ),
    )


@pytest.fixture
def baseline_plan():
    """Standard rate."""
    return FlatPlan(id="baseline", provider="Utility", discount=0.0)


@pytest.fixture
def sample_catalog(flat_plan, night_plan, day_plan, tiered_plan, baseline_plan):
    """Catalog with one plan of each discount shape plus a baseline."""
    return PlanCatalog(
        plans=(flat_plan, night_plan, day_plan, tiered_plan, baseline_plan),
        base_rate=BASE_RATE,
        vat_rate=VAT_RATE,
        last_updated="2024-01-01",
    )


@pytest.fixture
def records_to_usage():
    """Factory fixture wrapping hand-built records in ParsedUsageData."""
    return make_usage_data
