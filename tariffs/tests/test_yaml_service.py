"""
Unit tests for the plan catalog YAML service.

Tests loading the bundled catalog, shape inference, validation errors and
export roundtrip.
"""

import math
import tempfile
from pathlib import Path

from django.conf import settings
from django.test import SimpleTestCase, override_settings

from billing.core.types import (
    ALL_DAYS,
    WEEKDAYS,
    BillTieredPlan,
    FlatPlan,
    MembershipType,
    PlanShape,
    TimeOfUsePlan,
)
from billing.exceptions import CatalogError
from tariffs.yaml_service import (
    PlanCatalogYAMLExporter,
    PlanCatalogYAMLImporter,
    export_catalog_to_yaml,
    load_catalog_from_yaml,
    load_default_catalog,
    reload_default_catalog,
)


def load(yaml_content):
    return PlanCatalogYAMLImporter(yaml_content).load_catalog()


class DefaultCatalogTests(SimpleTestCase):
    """Test the catalog shipped with the project."""

    @classmethod
    def setUpClass(cls):
        super().setUpClass()
        cls.catalog = load_catalog_from_yaml(settings.TARIFF_CATALOG_PATH)

    def test_rates(self):
        self.assertEqual(self.catalog.base_rate, 0.5451)
        self.assertEqual(self.catalog.vat_rate, 0.18)
        self.assertAlmostEqual(self.catalog.vat_multiplier, 1.18)

    def test_plan_ids_unique(self):
        ids = [plan.id for plan in self.catalog.plans]
        self.assertEqual(len(ids), len(set(ids)))
        self.assertGreater(len(ids), 20)

    def test_flat_plan(self):
        plan = self.catalog.get_plan("super-power-power")

        self.assertIsInstance(plan, FlatPlan)
        self.assertEqual(plan.shape, PlanShape.FLAT)
        self.assertEqual(plan.discount, 0.065)
        self.assertFalse(plan.requires_smart_meter)
        self.assertEqual(plan.provider_he, "סופר פאוור")

    def test_time_of_use_plan(self):
        plan = self.catalog.get_plan("super-power-night-plus")

        self.assertIsInstance(plan, TimeOfUsePlan)
        self.assertTrue(plan.requires_smart_meter)
        (window,) = plan.windows
        self.assertEqual(window.days, WEEKDAYS)
        self.assertEqual((window.start_hour, window.end_hour), (23, 7))
        self.assertEqual(window.discount, 0.21)

    def test_bill_tiered_plan(self):
        plan = self.catalog.get_plan("cellcom-variable")

        self.assertIsInstance(plan, BillTieredPlan)
        self.assertEqual([t.discount for t in plan.bill_tiers], [0.10, 0.08, 0.06, 0.05])
        self.assertTrue(math.isinf(plan.bill_tiers[-1].max_bill))

    def test_capped_plan_with_membership(self):
        plan = self.catalog.get_plan("pazgas-yellow")

        self.assertEqual(plan.max_monthly_savings, 50)
        self.assertEqual(plan.requires_membership.type, MembershipType.APP)

    def test_discount_range(self):
        plan = self.catalog.get_plan("amisragas-fixed")

        self.assertEqual((plan.discount_range.min, plan.discount_range.max), (0.06, 0.07))
        self.assertEqual(plan.discount, 0.065)

    def test_baseline_plan(self):
        plan = self.catalog.get_plan("iec-baseline")

        self.assertEqual(plan.discount, 0)
        self.assertEqual(plan.discount_windows, ())

    def test_smart_meter_partition(self):
        self.assertEqual(
            len(self.catalog.smart_meter_plans) + len(self.catalog.non_smart_meter_plans),
            len(self.catalog.plans),
        )
        self.assertIn("Super Power", self.catalog.providers)


class CatalogCacheTests(SimpleTestCase):
    """Test loading the configured catalog."""

    def test_default_catalog_cached(self):
        self.assertIs(load_default_catalog(), load_default_catalog())

    def test_reload_picks_up_new_path(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "catalog.yaml"
            path.write_text(
                "plans:\n  - {id: only, provider: Test, discount: 0.05}\n", encoding="utf-8"
            )
            with override_settings(TARIFF_CATALOG_PATH=path):
                catalog = reload_default_catalog()

        self.assertEqual([plan.id for plan in catalog.plans], ["only"])
        self.assertEqual(catalog.base_rate, 0.5451)
        reload_default_catalog()


class ShapeInferenceTests(SimpleTestCase):
    """Test which plan class is built from the YAML fields."""

    def test_single_all_day_window_is_flat(self):
        catalog = load(
            """
plans:
  - id: p
    provider: Test
    discount_windows:
      - {days: all, start_hour: 0, end_hour: 24, discount: 0.07}
"""
        )
        plan = catalog.plans[0]
        self.assertIsInstance(plan, FlatPlan)
        self.assertEqual(plan.discount, 0.07)

    def test_partial_window_is_time_of_use(self):
        catalog = load(
            """
plans:
  - id: p
    provider: Test
    discount_windows:
      - {days: [5, 6], start_hour: 0, end_hour: 24, discount: 0.3}
      - {days: all, start_hour: 23, end_hour: 7, discount: 0.2}
    default_discount: 0.02
"""
        )
        plan = catalog.plans[0]
        self.assertIsInstance(plan, TimeOfUsePlan)
        self.assertEqual(plan.windows[0].days, frozenset({5, 6}))
        self.assertEqual(plan.windows[1].days, ALL_DAYS)
        self.assertEqual(plan.default_discount, 0.02)

    def test_open_ended_tier(self):
        catalog = load(
            """
plans:
  - id: p
    provider: Test
    bill_tiers:
      - {max_bill: 100, discount: 0.1}
      - {max_bill: null, discount: 0.05}
"""
        )
        self.assertTrue(math.isinf(catalog.plans[0].bill_tiers[-1].max_bill))


class CatalogErrorTests(SimpleTestCase):
    """Test rejection of invalid catalogs."""

    def assertCatalogError(self, yaml_content, message, plan_id=None):
        with self.assertRaises(CatalogError) as ctx:
            load(yaml_content)
        self.assertIn(message, str(ctx.exception))
        self.assertEqual(ctx.exception.plan_id, plan_id)

    def test_invalid_yaml(self):
        self.assertCatalogError("plans: [unclosed", "Invalid YAML syntax")

    def test_empty_file(self):
        self.assertCatalogError("", "Empty YAML file")

    def test_missing_plans(self):
        self.assertCatalogError("base_rate: 0.5", "Missing required top-level key: plans")

    def test_missing_provider(self):
        self.assertCatalogError("plans:\n  - {id: p, discount: 0.1}", "provider", plan_id="p")

    def test_duplicate_id(self):
        self.assertCatalogError(
            "plans:\n  - {id: p, provider: A}\n  - {id: p, provider: B}",
            "Duplicate plan id",
            plan_id="p",
        )

    def test_unknown_day_alias(self):
        self.assertCatalogError(
            "plans:\n  - id: p\n    provider: A\n    discount_windows:\n"
            "      - {days: weekends, start_hour: 0, end_hour: 6, discount: 0.1}",
            "Unknown day alias",
            plan_id="p",
        )

    def test_unsorted_tiers(self):
        self.assertCatalogError(
            "plans:\n  - id: p\n    provider: A\n    bill_tiers:\n"
            "      - {max_bill: 200, discount: 0.1}\n      - {max_bill: 100, discount: 0.2}",
            "sorted",
            plan_id="p",
        )

    def test_discount_out_of_range(self):
        self.assertCatalogError("plans:\n  - {id: p, provider: A, discount: 5}", "discount", plan_id="p")

    def test_non_positive_base_rate(self):
        self.assertCatalogError("base_rate: 0\nplans: []", "base_rate must be positive")


class CatalogExportTests(SimpleTestCase):
    """Test YAML export."""

    def test_roundtrip(self):
        catalog = load_catalog_from_yaml(settings.TARIFF_CATALOG_PATH)

        exported = export_catalog_to_yaml(catalog)

        self.assertEqual(load(exported), catalog)

    def test_export_is_readable(self):
        catalog = load("plans:\n  - {id: p, provider: פזגז, discount: 0.06}")

        exported = PlanCatalogYAMLExporter(catalog).export_to_yaml()

        self.assertIn("provider: פזגז", exported)
        self.assertIn("shape: flat", exported)
