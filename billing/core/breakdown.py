"""
Aggregate usage into discounted and regular portions for a single plan.
"""

from __future__ import annotations

from typing import Sequence

import pandas as pd

from usage.types import UsageRecord

from .applicability import get_discount_for_bill_amount, get_discount_for_slot
from .types import BillTieredPlan, ElectricityPlan, UsageBreakdown
from .util import _records_to_dataframe


def _apply_window_discounts(usage: pd.DataFrame, plan: ElectricityPlan) -> pd.Series:
    """
    Look up the discount for every interval.

    The discount only depends on (weekday, hour), so each distinct slot is
    evaluated once and joined back onto the intervals.
    """
    slots = usage[["weekday", "hour"]].drop_duplicates().copy()
    slots["discount"] = [
        get_discount_for_slot(plan, weekday, hour)
        for weekday, hour in slots.itertuples(index=False)
    ]
    merged = usage[["weekday", "hour"]].merge(slots, on=["weekday", "hour"], how="left")
    return pd.Series(merged["discount"].to_numpy(), index=usage.index)


def calculate_window_breakdown(
    usage: pd.DataFrame, plan: ElectricityPlan, base_rate: float
) -> UsageBreakdown:
    """
    Breakdown for flat and time-of-use plans.

    Intervals with a discount above zero count as discounted; a matched window
    with a discount of exactly 0 counts as regular usage.

    Args:
        usage: DataFrame from _records_to_dataframe
        plan: the plan to evaluate
        base_rate: standard price per kWh before VAT

    Returns:
        UsageBreakdown with savings before VAT
    """
    if usage.empty:
        return UsageBreakdown(0.0, 0.0, 0.0, 0.0)

    discount = _apply_window_discounts(usage, plan)
    discounted = discount > 0

    discounted_kwh = float(usage.loc[discounted, "kwh"].sum())
    regular_kwh = float(usage.loc[~discounted, "kwh"].sum())
    discounted_savings = float(
        (usage.loc[discounted, "kwh"] * base_rate * discount[discounted]).sum()
    )

    return UsageBreakdown(
        discounted_kwh=discounted_kwh,
        discounted_savings=discounted_savings,
        regular_kwh=regular_kwh,
        total_kwh=discounted_kwh + regular_kwh,
    )


def calculate_monthly_kwh(usage: pd.DataFrame) -> pd.Series:
    """Total kWh per calendar month, indexed by monthly Period."""
    return usage.groupby(usage["date"].dt.to_period("M"))["kwh"].sum()


def calculate_bill_tiered_breakdown(
    usage: pd.DataFrame, plan: BillTieredPlan, base_rate: float
) -> UsageBreakdown:
    """
    Breakdown for plans whose discount depends on the monthly bill.

    Each calendar month's whole usage gets the single tier selected by that
    month's pre-VAT bill. A plan without tiers gives no discount and all usage
    is regular.
    """
    if usage.empty:
        return UsageBreakdown(0.0, 0.0, 0.0, 0.0)

    monthly_kwh = calculate_monthly_kwh(usage)
    total_kwh = float(monthly_kwh.sum())

    if not plan.bill_tiers:
        return UsageBreakdown(
            discounted_kwh=0.0,
            discounted_savings=0.0,
            regular_kwh=total_kwh,
            total_kwh=total_kwh,
        )

    discounted_savings = 0.0
    for month_kwh in monthly_kwh:
        month_bill = float(month_kwh) * base_rate
        discount = get_discount_for_bill_amount(month_bill, plan.bill_tiers)
        discounted_savings += month_bill * discount

    return UsageBreakdown(
        discounted_kwh=total_kwh,
        discounted_savings=discounted_savings,
        regular_kwh=0.0,
        total_kwh=total_kwh,
    )


def calculate_usage_breakdown(
    records: Sequence[UsageRecord] | pd.DataFrame,
    plan: ElectricityPlan,
    base_rate: float,
) -> UsageBreakdown:
    """
    Split usage into discounted and regular portions under a plan.

    Args:
        records: usage records, or a DataFrame already built by
            _records_to_dataframe (reused across plans by the calculator)
        plan: the plan to evaluate
        base_rate: standard price per kWh before VAT

    Returns:
        UsageBreakdown whose total_kwh equals the input usage total
    """
    usage = records if isinstance(records, pd.DataFrame) else _records_to_dataframe(records)

    match plan:
        case BillTieredPlan():
            return calculate_bill_tiered_breakdown(usage, plan, base_rate)
        case _:
            return calculate_window_breakdown(usage, plan, base_rate)
