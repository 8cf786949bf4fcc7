"""
Unit tests for the bill-only savings estimate.
"""

import pytest

from billing.core.estimate import estimate_without_smart_meter
from billing.core.types import DiscountRange, FlatPlan, PlanCatalog


def test_fixed_plans_ranked_and_baseline_excluded(sample_catalog):
    """
    ₪300 a month under a 7% flat plan and a bill-tiered plan.

    Expected: flat saves 7% of ₪3600, tiered gets the top tier (5%);
    the baseline plan offers nothing and is left out
    """
    estimate = estimate_without_smart_meter(300, sample_catalog)

    assert estimate.yearly_cost == 3600
    assert [e.plan.id for e in estimate.fixed_plans] == ["flat-7", "tiered"]
    assert estimate.fixed_plans[0].savings == pytest.approx(252.0)
    assert estimate.fixed_plans[1].savings == pytest.approx(180.0)
    assert estimate.fixed_plans[1].is_tiered
    assert estimate.best_fixed_plan.new_yearly_cost == pytest.approx(3348.0)


def test_yearly_kwh_removes_vat(sample_catalog):
    estimate = estimate_without_smart_meter(300, sample_catalog)
    assert estimate.yearly_kwh == pytest.approx(3600 / 1.18 / 0.5451)


def test_smart_meter_plans_use_best_window(sample_catalog):
    """
    With 35% of usage in discount hours, a 20% night plan saves 7% of the bill.
    """
    estimate = estimate_without_smart_meter(300, sample_catalog)

    assert [e.plan.id for e in estimate.smart_meter_plans] == ["night-20", "day-15"]
    assert estimate.best_smart_meter_plan.max_discount == 0.20
    assert estimate.best_smart_meter_plan.savings == pytest.approx(3600 * 0.35 * 0.20)


def test_payoff_months(sample_catalog):
    """
    Expected: night plan saves ₪360 vs ₪252 flat; ₪9 a month extra pays a
    ₪265 meter back in 30 months
    """
    estimate = estimate_without_smart_meter(300, sample_catalog, discount_hours_share=0.5)

    assert estimate.months_to_payoff == 30


def test_no_payoff_when_fixed_plan_is_better(sample_catalog):
    estimate = estimate_without_smart_meter(300, sample_catalog, discount_hours_share=0.1)
    assert estimate.months_to_payoff is None


def test_fixed_plan_cap_and_range():
    plan = FlatPlan(
        id="capped",
        provider="Test",
        discount=0.10,
        max_monthly_savings=20,
        discount_range=DiscountRange(min=0.05, max=0.15),
    )
    catalog = PlanCatalog(plans=(plan,), base_rate=0.5451, vat_rate=0.18)

    estimate = estimate_without_smart_meter(300, catalog)

    (fixed,) = estimate.fixed_plans
    assert fixed.savings_capped
    assert fixed.savings == pytest.approx(240.0)
    assert fixed.min_savings == pytest.approx(180.0)
    assert fixed.max_savings == pytest.approx(240.0)
    assert estimate.smart_meter_plans == ()
    assert estimate.months_to_payoff is None
