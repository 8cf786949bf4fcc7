"""
YAML import/export service for the plan catalog.

The catalog is configuration data maintained outside the code. It is loaded
once per path and can be reloaded after the file changes.

YAML Format:
    base_rate: 0.5451
    vat_rate: 0.18
    last_updated: "2026-01-12"

    plans:
      - id: "super-power-power"
        provider: "Super Power"
        provider_he: "סופר פאוור"
        plan_name: "POWER Plan"
        requires_smart_meter: false
        discount: 0.065

      - id: "super-power-night-plus"
        provider: "Super Power"
        requires_smart_meter: true
        discount_windows:
          - days: weekdays
            start_hour: 23
            end_hour: 7
            discount: 0.21
        default_discount: 0

      - id: "cellcom-variable"
        provider: "Cellcom Energy"
        bill_tiers:
          - max_bill: 149
            discount: 0.10
          - max_bill: .inf
            discount: 0.05
"""

import functools
import logging
import math
from pathlib import Path
from typing import Any, Optional

import yaml
from django.conf import settings

from billing.core.types import (
    ALL_DAYS,
    WEEKDAYS,
    BillTier,
    BillTieredPlan,
    DiscountRange,
    DiscountWindow,
    ElectricityPlan,
    FlatPlan,
    Membership,
    MembershipType,
    PlanCatalog,
    PlanShape,
    TimeOfUsePlan,
)
from billing.exceptions import CatalogError

logger = logging.getLogger(__name__)

DEFAULT_BASE_RATE = 0.5451
DEFAULT_VAT_RATE = 0.18

DAY_ALIASES = {"all": ALL_DAYS, "weekdays": WEEKDAYS}


class PlanCatalogYAMLImporter:
    """Build a PlanCatalog from YAML content with validation."""

    def __init__(self, yaml_content: str):
        """
        Initialize importer with YAML content.

        Args:
            yaml_content: YAML string to parse
        """
        self.yaml_content = yaml_content

    def load_catalog(self) -> PlanCatalog:
        """
        Parse the YAML into a catalog.

        Raises:
            CatalogError: If the YAML is invalid or a plan is malformed
        """
        data = self._parse_yaml()
        self._validate_schema(data)

        plans = []
        seen_ids: set[str] = set()
        for plan_data in data["plans"]:
            plan = self._create_plan(plan_data)
            if plan.id in seen_ids:
                raise CatalogError("Duplicate plan id", plan_id=plan.id)
            seen_ids.add(plan.id)
            plans.append(plan)

        try:
            base_rate = float(data.get("base_rate", DEFAULT_BASE_RATE))
            vat_rate = float(data.get("vat_rate", DEFAULT_VAT_RATE))
        except (TypeError, ValueError) as e:
            raise CatalogError(f"Invalid rate: {e}") from e
        if base_rate <= 0:
            raise CatalogError("base_rate must be positive")
        if vat_rate < 0:
            raise CatalogError("vat_rate cannot be negative")

        return PlanCatalog(
            plans=tuple(plans),
            base_rate=base_rate,
            vat_rate=vat_rate,
            last_updated=str(data.get("last_updated") or ""),
        )

    def _parse_yaml(self) -> dict:
        """Parse YAML content with error handling."""
        try:
            data = yaml.safe_load(self.yaml_content)
        except yaml.YAMLError as e:
            raise CatalogError(f"Invalid YAML syntax: {str(e)}") from e
        if data is None:
            raise CatalogError("Empty YAML file")
        return data

    def _validate_schema(self, data: Any):
        """Validate top-level YAML structure."""
        if not isinstance(data, dict):
            raise CatalogError("YAML must contain a dictionary at top level")

        if "plans" not in data:
            raise CatalogError("Missing required top-level key: plans")

        if not isinstance(data["plans"], list):
            raise CatalogError("plans must be a list")

    def _create_plan(self, plan_data: dict) -> ElectricityPlan:
        """Create and validate a single plan."""
        if not isinstance(plan_data, dict):
            raise CatalogError("Each plan must be a dictionary")

        plan_id = plan_data.get("id")
        missing = [key for key in ("id", "provider") if not plan_data.get(key)]
        if missing:
            raise CatalogError(f"Missing required field(s): {', '.join(missing)}", plan_id=plan_id)

        common = {
            "id": str(plan_id),
            "provider": plan_data["provider"],
            "provider_he": plan_data.get("provider_he", ""),
            "plan_name": plan_data.get("plan_name", ""),
            "plan_name_he": plan_data.get("plan_name_he", ""),
            "requires_smart_meter": bool(plan_data.get("requires_smart_meter", False)),
            "max_monthly_savings": self._optional_float(plan_data.get("max_monthly_savings")),
            "requires_membership": self._parse_membership(plan_data.get("requires_membership")),
            "discount_range": self._parse_discount_range(plan_data.get("discount_range")),
            "conditions": tuple(plan_data.get("conditions") or ()),
            "conditions_he": tuple(plan_data.get("conditions_he") or ()),
            "source_url": plan_data.get("source_url", ""),
            "last_updated": str(plan_data.get("last_updated") or ""),
        }

        try:
            shape = self._determine_shape(plan_data)
            if shape == PlanShape.BILL_TIERED:
                return BillTieredPlan(
                    bill_tiers=self._parse_tiers(plan_data.get("bill_tiers") or []),
                    **common,
                )
            if shape == PlanShape.TIME_OF_USE:
                return TimeOfUsePlan(
                    windows=tuple(
                        self._parse_window(w) for w in plan_data.get("discount_windows") or []
                    ),
                    fallback_discount=float(plan_data.get("default_discount") or 0),
                    **common,
                )
            return FlatPlan(discount=self._flat_discount(plan_data), **common)
        except (KeyError, TypeError, ValueError) as e:
            raise CatalogError(str(e), plan_id=plan_id) from e

    def _determine_shape(self, plan_data: dict) -> PlanShape:
        """Use the explicit shape, or infer it from which discount fields are present."""
        if plan_data.get("shape"):
            return PlanShape(plan_data["shape"])
        if "bill_tiers" in plan_data:
            return PlanShape.BILL_TIERED
        if "discount_windows" in plan_data:
            windows = plan_data["discount_windows"] or []
            if not windows:
                return PlanShape.FLAT
            if len(windows) == 1:
                window = self._parse_window(windows[0])
                if window.is_all_day and window.days == ALL_DAYS:
                    return PlanShape.FLAT
            return PlanShape.TIME_OF_USE
        return PlanShape.FLAT

    def _flat_discount(self, plan_data: dict) -> float:
        if "discount" in plan_data:
            return float(plan_data["discount"])
        windows = plan_data.get("discount_windows") or []
        if windows:
            return float(windows[0]["discount"])
        return float(plan_data.get("default_discount") or 0)

    def _parse_window(self, window_data: dict) -> DiscountWindow:
        return DiscountWindow(
            days=self._parse_days(window_data.get("days", "all")),
            start_hour=int(window_data["start_hour"]),
            end_hour=int(window_data["end_hour"]),
            discount=float(window_data["discount"]),
        )

    def _parse_days(self, days: Any) -> frozenset[int]:
        """Parse a day alias ("all", "weekdays") or a list of day indices."""
        if isinstance(days, str):
            if days not in DAY_ALIASES:
                raise ValueError(f"Unknown day alias: '{days}'. Expected 'all' or 'weekdays'")
            return DAY_ALIASES[days]
        return frozenset(int(day) for day in days)

    def _parse_tiers(self, tiers_data: list[dict]) -> tuple[BillTier, ...]:
        tiers = [
            BillTier(
                max_bill=math.inf if t.get("max_bill") is None else float(t["max_bill"]),
                discount=float(t["discount"]),
            )
            for t in tiers_data
        ]
        if any(a.max_bill > b.max_bill for a, b in zip(tiers, tiers[1:])):
            raise ValueError("bill_tiers must be sorted by ascending max_bill")
        return tuple(tiers)

    def _parse_membership(self, data: Optional[dict]) -> Optional[Membership]:
        if not data:
            return None
        return Membership(
            type=MembershipType(data.get("type", "other")),
            description_he=data.get("description_he", ""),
            description_en=data.get("description_en", ""),
        )

    def _parse_discount_range(self, data: Optional[dict]) -> Optional[DiscountRange]:
        if not data:
            return None
        return DiscountRange(
            min=float(data["min"]),
            max=float(data["max"]),
            min_label_he=data.get("min_label_he", ""),
            min_label_en=data.get("min_label_en", ""),
            max_label_he=data.get("max_label_he", ""),
            max_label_en=data.get("max_label_en", ""),
        )

    def _optional_float(self, value: Any) -> Optional[float]:
        if value is None or value == "":
            return None
        return float(value)


class PlanCatalogYAMLExporter:
    """Export a PlanCatalog to YAML format."""

    def __init__(self, catalog: PlanCatalog):
        self.catalog = catalog

    def export_to_yaml(self) -> str:
        """
        Export the catalog to a YAML string that PlanCatalogYAMLImporter accepts.
        """
        data = {
            "base_rate": self.catalog.base_rate,
            "vat_rate": self.catalog.vat_rate,
            "last_updated": self.catalog.last_updated,
            "plans": [self._serialize_plan(plan) for plan in self.catalog.plans],
        }
        return yaml.safe_dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)

    def _serialize_plan(self, plan: ElectricityPlan) -> dict:
        """Convert a plan to a dictionary."""
        result: dict[str, Any] = {
            "id": plan.id,
            "provider": plan.provider,
            "provider_he": plan.provider_he,
            "plan_name": plan.plan_name,
            "plan_name_he": plan.plan_name_he,
            "requires_smart_meter": plan.requires_smart_meter,
            "shape": plan.shape.value,
        }

        match plan:
            case FlatPlan():
                result["discount"] = plan.discount
            case TimeOfUsePlan():
                result["discount_windows"] = [
                    {
                        "days": sorted(w.days),
                        "start_hour": w.start_hour,
                        "end_hour": w.end_hour,
                        "discount": w.discount,
                    }
                    for w in plan.windows
                ]
                result["default_discount"] = plan.fallback_discount
            case BillTieredPlan():
                result["bill_tiers"] = [
                    {
                        "max_bill": None if math.isinf(t.max_bill) else t.max_bill,
                        "discount": t.discount,
                    }
                    for t in plan.bill_tiers
                ]

        if plan.max_monthly_savings is not None:
            result["max_monthly_savings"] = plan.max_monthly_savings
        if plan.requires_membership is not None:
            result["requires_membership"] = {
                "type": plan.requires_membership.type.value,
                "description_he": plan.requires_membership.description_he,
                "description_en": plan.requires_membership.description_en,
            }
        if plan.discount_range is not None:
            r = plan.discount_range
            result["discount_range"] = {
                "min": r.min,
                "max": r.max,
                "min_label_he": r.min_label_he,
                "min_label_en": r.min_label_en,
                "max_label_he": r.max_label_he,
                "max_label_en": r.max_label_en,
            }
        if plan.conditions:
            result["conditions"] = list(plan.conditions)
        if plan.conditions_he:
            result["conditions_he"] = list(plan.conditions_he)
        if plan.source_url:
            result["source_url"] = plan.source_url
        if plan.last_updated:
            result["last_updated"] = plan.last_updated
        return result


def load_catalog_from_yaml(path: Path) -> PlanCatalog:
    """Load a plan catalog from a YAML file."""
    with open(path, encoding="utf-8") as f:
        catalog = PlanCatalogYAMLImporter(f.read()).load_catalog()
    logger.info("Loaded %d plans from %s", len(catalog.plans), path)
    return catalog


@functools.lru_cache(maxsize=None)
def _load_cached_catalog(path: str) -> PlanCatalog:
    return load_catalog_from_yaml(Path(path))


def load_default_catalog() -> PlanCatalog:
    """Load the catalog configured by settings.TARIFF_CATALOG_PATH, once per path."""
    return _load_cached_catalog(str(settings.TARIFF_CATALOG_PATH))


def reload_default_catalog() -> PlanCatalog:
    """Drop cached catalogs and load the configured one again."""
    _load_cached_catalog.cache_clear()
    return load_default_catalog()


def export_catalog_to_yaml(catalog: PlanCatalog) -> str:
    """Export a catalog to YAML. See PlanCatalogYAMLExporter."""
    return PlanCatalogYAMLExporter(catalog).export_to_yaml()
