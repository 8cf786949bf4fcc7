"""
Savings estimate for households without interval data.

Works from a single VAT-inclusive monthly bill instead of meter readings.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from .applicability import get_discount_for_bill_amount
from .types import BillTieredPlan, ElectricityPlan, PlanCatalog

SMART_METER_COST = 265.0
ASSUMED_DISCOUNT_HOURS_SHARE = 0.35
MONTHS_PER_YEAR = 12


@dataclass(frozen=True, slots=True)
class FixedPlanEstimate:
    """Yearly savings of a plan usable without a smart meter."""

    plan: ElectricityPlan
    discount: float
    savings: float
    new_yearly_cost: float
    savings_capped: bool = False
    is_tiered: bool = False
    min_savings: Optional[float] = None
    max_savings: Optional[float] = None


@dataclass(frozen=True, slots=True)
class SmartMeterPlanEstimate:
    """Yearly savings of a time-of-use plan, assuming a typical usage share."""

    plan: ElectricityPlan
    max_discount: float
    savings: float
    new_yearly_cost: float


@dataclass(frozen=True, slots=True)
class NoSmartMeterEstimate:
    """Comparison of fixed plans against the best time-of-use plan."""

    monthly_bill: float
    yearly_cost: float
    yearly_kwh: float
    fixed_plans: tuple[FixedPlanEstimate, ...]
    smart_meter_plans: tuple[SmartMeterPlanEstimate, ...]
    smart_meter_cost: float
    months_to_payoff: Optional[int]

    @property
    def best_fixed_plan(self) -> Optional[FixedPlanEstimate]:
        return self.fixed_plans[0] if self.fixed_plans else None

    @property
    def best_smart_meter_plan(self) -> Optional[SmartMeterPlanEstimate]:
        return self.smart_meter_plans[0] if self.smart_meter_plans else None


def _cap(value: Optional[float], cap: Optional[float]) -> Optional[float]:
    if value is None or cap is None:
        return value
    return min(value, cap)


def _estimate_fixed_plan(
    plan: ElectricityPlan, monthly_bill: float, yearly_cost: float
) -> FixedPlanEstimate:
    is_tiered = isinstance(plan, BillTieredPlan)
    if is_tiered:
        discount = get_discount_for_bill_amount(monthly_bill, plan.bill_tiers)
    elif plan.discount_windows:
        discount = plan.discount_windows[0].discount or plan.default_discount
    else:
        discount = plan.default_discount

    savings = yearly_cost * discount
    min_savings = max_savings = None
    if plan.discount_range is not None:
        min_savings = yearly_cost * plan.discount_range.min
        max_savings = yearly_cost * plan.discount_range.max

    savings_capped = False
    yearly_cap = None
    if plan.max_monthly_savings is not None:
        yearly_cap = plan.max_monthly_savings * MONTHS_PER_YEAR
        if savings > yearly_cap:
            savings = yearly_cap
            savings_capped = True

    return FixedPlanEstimate(
        plan=plan,
        discount=discount,
        savings=savings,
        new_yearly_cost=yearly_cost - savings,
        savings_capped=savings_capped,
        is_tiered=is_tiered,
        min_savings=_cap(min_savings, yearly_cap),
        max_savings=_cap(max_savings, yearly_cap),
    )


def estimate_without_smart_meter(
    monthly_bill: float,
    catalog: PlanCatalog,
    smart_meter_cost: float = SMART_METER_COST,
    discount_hours_share: float = ASSUMED_DISCOUNT_HOURS_SHARE,
) -> NoSmartMeterEstimate:
    """
    Estimate yearly savings from a monthly bill alone.

    Plans that need no smart meter are priced directly from the bill. For
    smart-meter plans, discount_hours_share of the usage is assumed to fall in
    the plan's best discount window.

    Args:
        monthly_bill: typical monthly bill, including VAT
        catalog: plans and rates
        smart_meter_cost: one-time cost of installing a smart meter
        discount_hours_share: share of usage assumed to be in discount hours

    Returns:
        NoSmartMeterEstimate with both lists sorted by savings, highest first
    """
    yearly_cost = monthly_bill * MONTHS_PER_YEAR
    yearly_kwh = (yearly_cost / catalog.vat_multiplier) / catalog.base_rate

    fixed_plans = [
        _estimate_fixed_plan(plan, monthly_bill, yearly_cost)
        for plan in catalog.non_smart_meter_plans
        if isinstance(plan, BillTieredPlan) or plan.discount_windows
    ]
    fixed_plans.sort(key=lambda e: e.savings, reverse=True)

    smart_meter_plans = []
    for plan in catalog.smart_meter_plans:
        max_discount = max((w.discount for w in plan.discount_windows), default=0.0)
        savings = (
            yearly_kwh
            * discount_hours_share
            * catalog.base_rate
            * max_discount
            * catalog.vat_multiplier
        )
        smart_meter_plans.append(
            SmartMeterPlanEstimate(
                plan=plan,
                max_discount=max_discount,
                savings=savings,
                new_yearly_cost=yearly_cost - savings,
            )
        )
    smart_meter_plans.sort(key=lambda e: e.savings, reverse=True)

    months_to_payoff = None
    if smart_meter_plans:
        best_fixed_savings = fixed_plans[0].savings if fixed_plans else 0.0
        additional_savings = smart_meter_plans[0].savings - best_fixed_savings
        if additional_savings > 0:
            months_to_payoff = math.ceil(
                smart_meter_cost / (additional_savings / MONTHS_PER_YEAR)
            )

    return NoSmartMeterEstimate(
        monthly_bill=monthly_bill,
        yearly_cost=yearly_cost,
        yearly_kwh=yearly_kwh,
        fixed_plans=tuple(fixed_plans),
        smart_meter_plans=tuple(smart_meter_plans),
        smart_meter_cost=smart_meter_cost,
        months_to_payoff=months_to_payoff,
    )
