"""
Billing service layer.

Orchestrates parsing and validating an uploaded usage file, evaluating every
catalog plan against it with the core billing engine, and annualizing the
results.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from django.conf import settings

from billing.core.calculator import calculate_all_plans, extrapolate_to_annual
from billing.core.estimate import NoSmartMeterEstimate, estimate_without_smart_meter
from billing.core.types import PlanCatalog, PlanResult
from tariffs.yaml_service import load_default_catalog
from usage.csv_service import parse_usage_csv
from usage.exceptions import UsageDataError
from usage.types import ParsedUsageData
from usage.validation import validate_usage_data

logger = logging.getLogger(__name__)


@dataclass
class RecommendationResult:
    """Outcome of comparing all plans for one usage file."""

    usage_data: Optional[ParsedUsageData] = None
    results: list[PlanResult] = field(default_factory=list)
    annual_results: list[PlanResult] = field(default_factory=list)
    error: Optional[UsageDataError] = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def best_plan(self) -> Optional[PlanResult]:
        """Highest-saving annualized result."""
        return self.annual_results[0] if self.annual_results else None


def recommend_plans(
    csv_content: str, catalog: Optional[PlanCatalog] = None
) -> RecommendationResult:
    """
    Rank the catalog plans for a meter export.

    Args:
        csv_content: raw CSV text exported from the meter portal
        catalog: plans and rates; the configured default catalog when omitted

    Returns:
        RecommendationResult. When parsing or validation fails, error is set
        and no results are produced.

    Raises:
        CatalogError: If the default catalog cannot be loaded
    """
    parsed = parse_usage_csv(csv_content)
    if not parsed.success:
        logger.info("Usage file could not be parsed: %s", parsed.error.kind.value)
        return RecommendationResult(error=parsed.error)

    validated = validate_usage_data(parsed.data)
    if not validated.success:
        logger.info("Usage data rejected: %s", validated.error.kind.value)
        return RecommendationResult(usage_data=parsed.data, error=validated.error)

    usage_data = validated.data
    if catalog is None:
        catalog = load_default_catalog()

    results = calculate_all_plans(usage_data, catalog)
    annual_results = extrapolate_to_annual(
        results, usage_data.start_date, usage_data.end_date
    )

    logger.info(
        "Compared %d plans over %d records (%s to %s)",
        len(results),
        len(usage_data.records),
        usage_data.start_date,
        usage_data.end_date,
    )

    return RecommendationResult(
        usage_data=usage_data,
        results=results,
        annual_results=annual_results,
    )


def serialize_plan_result(result: PlanResult) -> dict[str, Any]:
    """Convert a PlanResult to a JSON-ready dict keyed by plan id."""
    breakdown = result.breakdown
    return {
        "plan_id": result.plan.id,
        "provider": result.plan.provider,
        "plan_name": result.plan.plan_name,
        "total_usage_kwh": result.total_usage_kwh,
        "baseline_cost": result.baseline_cost,
        "discounted_cost": result.discounted_cost,
        "savings": result.savings,
        "savings_percent": result.savings_percent,
        "savings_capped": result.savings_capped,
        "uncapped_savings": result.uncapped_savings,
        "breakdown": {
            "discounted_usage_kwh": breakdown.discounted_usage_kwh,
            "discounted_cost": breakdown.discounted_cost,
            "discounted_savings": breakdown.discounted_savings,
            "regular_usage_kwh": breakdown.regular_usage_kwh,
            "regular_cost": breakdown.regular_cost,
        },
    }


def estimate_savings_from_bill(
    monthly_bill: float, catalog: Optional[PlanCatalog] = None
) -> NoSmartMeterEstimate:
    """
    Estimate yearly savings for a household without a smart meter.

    Uses the SMART_METER_COST and ASSUMED_DISCOUNT_HOURS_SHARE settings.

    Raises:
        ValueError: If monthly_bill is not positive
        CatalogError: If the default catalog cannot be loaded
    """
    if monthly_bill <= 0:
        raise ValueError(f"monthly_bill must be positive, got {monthly_bill}")
    if catalog is None:
        catalog = load_default_catalog()

    return estimate_without_smart_meter(
        monthly_bill,
        catalog,
        smart_meter_cost=settings.SMART_METER_COST,
        discount_hours_share=settings.ASSUMED_DISCOUNT_HOURS_SHARE,
    )
