"""
Core plan comparison functions.

Evaluates every plan in a catalog against one usage data set, ranks the
results and scales them to a full year.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date

import pandas as pd

from usage.types import ParsedUsageData

from .breakdown import calculate_usage_breakdown
from .types import ElectricityPlan, PlanCatalog, PlanResult, ResultBreakdown, UsageBreakdown
from .util import _count_calendar_months, _days_between, _records_to_dataframe

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = 365


def calculate_plan_result(
    plan: ElectricityPlan,
    usage: pd.DataFrame,
    total_kwh: float,
    catalog: PlanCatalog,
    num_months: int = 12,
) -> PlanResult:
    """
    Calculate cost and savings of one plan.

    All currency amounts include VAT. Savings are capped at
    max_monthly_savings * num_months when the plan has a cap.

    Args:
        plan: the plan to evaluate
        usage: DataFrame from _records_to_dataframe
        total_kwh: total usage of the data set
        catalog: supplies the base rate and VAT rate
        num_months: months covered by the data, for the savings cap

    Returns:
        PlanResult for this plan
    """
    breakdown = calculate_usage_breakdown(usage, plan, catalog.base_rate)
    return _build_plan_result(plan, breakdown, total_kwh, catalog, num_months)


def _build_plan_result(
    plan: ElectricityPlan,
    breakdown: UsageBreakdown,
    total_kwh: float,
    catalog: PlanCatalog,
    num_months: int,
) -> PlanResult:
    vat_multiplier = catalog.vat_multiplier

    baseline_cost = total_kwh * catalog.base_rate * vat_multiplier
    savings = breakdown.discounted_savings * vat_multiplier
    savings_capped = False
    uncapped_savings = None

    # Caps are advertised including VAT
    if plan.max_monthly_savings is not None:
        max_total_savings = plan.max_monthly_savings * num_months
        if savings > max_total_savings:
            uncapped_savings = savings
            savings = max_total_savings
            savings_capped = True

    discounted_cost = baseline_cost - savings
    savings_percent = (savings / baseline_cost) * 100 if baseline_cost > 0 else 0.0

    return PlanResult(
        plan=plan,
        total_usage_kwh=total_kwh,
        baseline_cost=baseline_cost,
        discounted_cost=discounted_cost,
        savings=savings,
        savings_percent=savings_percent,
        savings_capped=savings_capped,
        uncapped_savings=uncapped_savings,
        breakdown=ResultBreakdown(
            discounted_usage_kwh=breakdown.discounted_kwh,
            discounted_cost=(
                breakdown.discounted_kwh * catalog.base_rate - breakdown.discounted_savings
            )
            * vat_multiplier,
            discounted_savings=breakdown.discounted_savings * vat_multiplier,
            regular_usage_kwh=breakdown.regular_kwh,
            regular_cost=breakdown.regular_kwh * catalog.base_rate * vat_multiplier,
        ),
    )


def _zero_discount_result(
    plan: ElectricityPlan, total_kwh: float, catalog: PlanCatalog, num_months: int
) -> PlanResult:
    breakdown = UsageBreakdown(
        discounted_kwh=0.0,
        discounted_savings=0.0,
        regular_kwh=total_kwh,
        total_kwh=total_kwh,
    )
    return _build_plan_result(plan, breakdown, total_kwh, catalog, num_months)


def calculate_all_plans(usage_data: ParsedUsageData, catalog: PlanCatalog) -> list[PlanResult]:
    """
    Evaluate every catalog plan against the usage data.

    A plan that cannot be evaluated is logged and reported with no discount so
    that one bad catalog entry does not abort the comparison.

    Args:
        usage_data: parsed usage
        catalog: plans and rates to evaluate

    Returns:
        One PlanResult per plan, sorted by savings (highest first). Plans with
        equal savings keep catalog order.
    """
    num_months = _count_calendar_months(usage_data.start_date, usage_data.end_date)
    usage = _records_to_dataframe(usage_data.records)

    results: list[PlanResult] = []
    for plan in catalog.plans:
        try:
            result = calculate_plan_result(
                plan, usage, usage_data.total_kwh, catalog, num_months
            )
        except (ArithmeticError, AttributeError, LookupError, TypeError, ValueError):
            logger.exception("Could not evaluate plan %s; treating it as no discount", plan.id)
            result = _zero_discount_result(plan, usage_data.total_kwh, catalog, num_months)
        results.append(result)

    # sorted() is stable, also with reverse=True
    return sorted(results, key=lambda r: r.savings, reverse=True)


def _scale_result(result: PlanResult, multiplier: float) -> PlanResult:
    breakdown = result.breakdown
    return replace(
        result,
        total_usage_kwh=result.total_usage_kwh * multiplier,
        baseline_cost=result.baseline_cost * multiplier,
        discounted_cost=result.discounted_cost * multiplier,
        savings=result.savings * multiplier,
        breakdown=ResultBreakdown(
            discounted_usage_kwh=breakdown.discounted_usage_kwh * multiplier,
            discounted_cost=breakdown.discounted_cost * multiplier,
            discounted_savings=breakdown.discounted_savings * multiplier,
            regular_usage_kwh=breakdown.regular_usage_kwh * multiplier,
            regular_cost=breakdown.regular_cost * multiplier,
        ),
    )


def extrapolate_to_annual(
    results: list[PlanResult], start_date: date, end_date: date
) -> list[PlanResult]:
    """
    Scale results observed over less than a year to a full year.

    Energy and currency amounts are multiplied by 365 / days observed.
    savings_percent, savings_capped and uncapped_savings are left as computed.
    With a year or more of data the results are returned unchanged.

    Args:
        results: results from calculate_all_plans
        start_date: first day of the observed data
        end_date: last day of the observed data

    Returns:
        New list of results; the input results are not modified
    """
    days_observed = _days_between(start_date, end_date)
    if days_observed >= DAYS_PER_YEAR:
        return results

    # Single-day data would otherwise divide by zero
    days_observed = max(days_observed, 1)
    multiplier = DAYS_PER_YEAR / days_observed

    return [_scale_result(result, multiplier) for result in results]
