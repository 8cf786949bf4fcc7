"""
Chart data generation for usage visualizations.

Converts parsed usage into structured data for the hourly profile and the
discounted/regular usage split.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from billing.core.applicability import get_reference_weekday_discount
from billing.core.breakdown import calculate_usage_breakdown
from billing.core.types import ElectricityPlan, PlanCatalog
from usage.types import ParsedUsageData

SLOT_MINUTES = 15
SLOTS_PER_DAY = 24 * 60 // SLOT_MINUTES


@dataclass(frozen=True, slots=True)
class HourlyUsagePoint:
    """Average usage in one 15-minute slot of the day."""

    time: str  # "00:00", "00:15", ...
    hour: int
    minute: int
    avg_kwh: float
    discount: float  # under the selected plan, for a typical weekday


@dataclass(frozen=True, slots=True)
class TimeBreakdown:
    """Share of usage that gets a discount under a plan."""

    discounted_kwh: float
    regular_kwh: float
    total_kwh: float
    discounted_percent: float
    regular_percent: float


def get_hourly_usage_profile(
    usage_data: ParsedUsageData, plan: Optional[ElectricityPlan] = None
) -> list[HourlyUsagePoint]:
    """
    Average usage for each 15-minute slot across all days.

    Args:
        usage_data: parsed usage
        plan: optional plan whose weekday discount is attached to each slot

    Returns:
        96 points, from 00:00 to 23:45. Slots without readings average 0.
    """
    slot_totals: dict[str, list[float]] = {}
    for record in usage_data.records:
        totals = slot_totals.setdefault(record.time, [0.0, 0])
        totals[0] += record.kwh_usage
        totals[1] += 1

    points = []
    for slot in range(SLOTS_PER_DAY):
        hour, minute = divmod(slot * SLOT_MINUTES, 60)
        time = f"{hour:02d}:{minute:02d}"
        total, count = slot_totals.get(time, (0.0, 0))
        points.append(
            HourlyUsagePoint(
                time=time,
                hour=hour,
                minute=minute,
                avg_kwh=total / count if count else 0.0,
                discount=get_reference_weekday_discount(plan, hour) if plan else 0.0,
            )
        )
    return points


def get_usage_breakdown_for_charts(
    usage_data: ParsedUsageData,
    catalog: PlanCatalog,
    plan: Optional[ElectricityPlan] = None,
) -> TimeBreakdown:
    """
    Discounted vs. regular usage for a plan.

    Without a plan, the first smart-meter plan in the catalog is used; when the
    catalog has none, all usage is regular.
    """
    target_plan = plan or next(iter(catalog.smart_meter_plans), None)

    if target_plan is None:
        return TimeBreakdown(
            discounted_kwh=0.0,
            regular_kwh=usage_data.total_kwh,
            total_kwh=usage_data.total_kwh,
            discounted_percent=0.0,
            regular_percent=100.0,
        )

    breakdown = calculate_usage_breakdown(usage_data.records, target_plan, catalog.base_rate)
    total = breakdown.total_kwh

    return TimeBreakdown(
        discounted_kwh=breakdown.discounted_kwh,
        regular_kwh=breakdown.regular_kwh,
        total_kwh=total,
        discounted_percent=(breakdown.discounted_kwh / total) * 100 if total > 0 else 0.0,
        regular_percent=(breakdown.regular_kwh / total) * 100 if total > 0 else 0.0,
    )
