"""
Helper functions for deciding which discount applies to a reading.

This module is the single place where discount windows and bill tiers are
interpreted. All functions are pure.
"""

from __future__ import annotations

from typing import Sequence

from usage.types import UsageRecord

from .types import BillTier, DiscountWindow, ElectricityPlan, WEEKDAYS


def window_matches_hour(window: DiscountWindow, hour: int) -> bool:
    """
    Check whether an hour of the day falls inside a window's hours.

    Handles all-day windows (0 -> 24) and windows that wrap past midnight.
    """
    if window.is_all_day:
        return True
    if window.wraps_midnight:
        return hour >= window.start_hour or hour < window.end_hour
    return window.start_hour <= hour < window.end_hour


def get_discount_for_slot(plan: ElectricityPlan, weekday: int, hour: int) -> float:
    """
    Discount in effect for a day of week and hour under a plan.

    The first window whose days include the weekday decides: its discount is
    returned if the hour matches, otherwise the plan's default discount. Later
    windows are only consulted when a window's days do not include the weekday.

    Args:
        plan: the plan to evaluate
        weekday: 0 = Sunday through 6 = Saturday
        hour: hour of day, 0-23

    Returns:
        Discount as a fraction
    """
    for window in plan.discount_windows:
        if weekday not in window.days:
            continue
        if window_matches_hour(window, hour):
            return window.discount
        break

    return plan.default_discount


def get_discount_for_record(record: UsageRecord, plan: ElectricityPlan) -> float:
    """Discount in effect for a single usage reading under a plan."""
    return get_discount_for_slot(plan, record.weekday, record.hour)


def get_discount_for_bill_amount(bill_amount: float, tiers: Sequence[BillTier]) -> float:
    """
    Discount for a monthly bill under tiered pricing.

    Tiers are ordered by ascending max_bill; the first tier with
    max_bill >= bill_amount wins. Bills above every tier get the last tier's
    discount, and no tiers means no discount.
    """
    for tier in tiers:
        if bill_amount <= tier.max_bill:
            return tier.discount
    return tiers[-1].discount if tiers else 0.0


def get_reference_weekday_discount(plan: ElectricityPlan, hour: int) -> float:
    """
    Discount shown for an hour on a typical weekday.

    Uses the first window that covers any weekday and matches the hour; when
    that gives no discount, falls back to the plan's default discount.
    """
    discount = 0.0
    for window in plan.discount_windows:
        if not window.days & WEEKDAYS:
            continue
        if window_matches_hour(window, hour):
            discount = window.discount
            break

    if discount == 0:
        discount = plan.default_discount
    return discount
