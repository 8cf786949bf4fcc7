"""
Define lightweight dataclasses for plan evaluation.

Plans are a tagged variant: FlatPlan, TimeOfUsePlan and BillTieredPlan share the
identity fields on ElectricityPlan and each carries only the fields its discount
shape needs. The YAML loader in tariffs.yaml_service builds them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional

ALL_DAYS: frozenset[int] = frozenset(range(7))
# Sunday through Thursday
WEEKDAYS: frozenset[int] = frozenset(range(5))


class PlanShape(str, Enum):
    """How a plan's discount is determined."""

    FLAT = "flat"
    TIME_OF_USE = "time_of_use"
    BILL_TIERED = "bill_tiered"


class MembershipType(str, Enum):
    """Kind of existing subscription a plan is tied to."""

    TV = "tv"
    INTERNET = "internet"
    MOBILE = "mobile"
    GAS = "gas"
    APP = "app"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class DiscountWindow:
    """
    Discount applicable on some days between two whole hours.

    Days use 0 = Sunday through 6 = Saturday. Hours are inclusive of start and
    exclusive of end. start_hour > end_hour wraps past midnight (23 -> 7 covers
    23:00-06:59); 0 -> 24 covers the whole day.
    """

    days: frozenset[int]
    start_hour: int
    end_hour: int
    discount: float

    def __post_init__(self) -> None:
        """Validate internal consistency of the window."""
        if not self.days <= ALL_DAYS:
            raise ValueError(f"days must be between 0 and 6, got {sorted(self.days)}")
        if not (0 <= self.start_hour <= 24 and 0 <= self.end_hour <= 24):
            raise ValueError("start_hour and end_hour must be between 0 and 24")
        if not 0 <= self.discount <= 1:
            raise ValueError(f"discount must be a fraction between 0 and 1, got {self.discount}")

    @property
    def is_all_day(self) -> bool:
        return self.start_hour == 0 and self.end_hour == 24

    @property
    def wraps_midnight(self) -> bool:
        return self.start_hour > self.end_hour


@dataclass(frozen=True, slots=True)
class BillTier:
    """Discount for monthly (pre-VAT) bills up to max_bill."""

    max_bill: float
    discount: float

    def __post_init__(self) -> None:
        if not 0 <= self.discount <= 1:
            raise ValueError(f"discount must be a fraction between 0 and 1, got {self.discount}")


@dataclass(frozen=True, slots=True)
class Membership:
    """Informational: the plan requires an existing subscription."""

    type: MembershipType
    description_he: str = ""
    description_en: str = ""


@dataclass(frozen=True, slots=True)
class DiscountRange:
    """Display-only discount band. Ranking always uses the plan's own discount."""

    min: float
    max: float
    min_label_he: str = ""
    min_label_en: str = ""
    max_label_he: str = ""
    max_label_en: str = ""


@dataclass(frozen=True, slots=True, kw_only=True)
class ElectricityPlan:
    """Catalog entry shared by all discount shapes."""

    id: str
    provider: str
    provider_he: str = ""
    plan_name: str = ""
    plan_name_he: str = ""
    requires_smart_meter: bool = False
    max_monthly_savings: Optional[float] = None
    requires_membership: Optional[Membership] = None
    discount_range: Optional[DiscountRange] = None
    conditions: tuple[str, ...] = ()
    conditions_he: tuple[str, ...] = ()
    source_url: str = ""
    last_updated: str = ""

    shape: ClassVar[PlanShape] = PlanShape.FLAT

    @property
    def discount_windows(self) -> tuple[DiscountWindow, ...]:
        return ()

    @property
    def default_discount(self) -> float:
        return 0.0


@dataclass(frozen=True, slots=True, kw_only=True)
class FlatPlan(ElectricityPlan):
    """One constant discount at all times. A discount of 0 is the standard rate."""

    discount: float = 0.0

    shape: ClassVar[PlanShape] = PlanShape.FLAT

    def __post_init__(self) -> None:
        if not 0 <= self.discount <= 1:
            raise ValueError(f"discount must be a fraction between 0 and 1, got {self.discount}")

    @property
    def discount_windows(self) -> tuple[DiscountWindow, ...]:
        if self.discount == 0:
            return ()
        return (DiscountWindow(days=ALL_DAYS, start_hour=0, end_hour=24, discount=self.discount),)

    @property
    def default_discount(self) -> float:
        return self.discount


@dataclass(frozen=True, slots=True, kw_only=True)
class TimeOfUsePlan(ElectricityPlan):
    """
    Discount depends on day and hour of consumption.

    Windows are ordered; the first window whose days include the reading's day
    decides (see billing.core.applicability).
    """

    windows: tuple[DiscountWindow, ...] = ()
    fallback_discount: float = 0.0

    shape: ClassVar[PlanShape] = PlanShape.TIME_OF_USE

    @property
    def discount_windows(self) -> tuple[DiscountWindow, ...]:
        return self.windows

    @property
    def default_discount(self) -> float:
        return self.fallback_discount


@dataclass(frozen=True, slots=True, kw_only=True)
class BillTieredPlan(ElectricityPlan):
    """Discount depends on the size of the monthly bill. Tiers ascend by max_bill."""

    bill_tiers: tuple[BillTier, ...] = ()

    shape: ClassVar[PlanShape] = PlanShape.BILL_TIERED


@dataclass(frozen=True, slots=True)
class PlanCatalog:
    """Ordered, read-only set of plans and the rates they are evaluated against."""

    plans: tuple[ElectricityPlan, ...]
    base_rate: float  # currency per kWh, before VAT
    vat_rate: float  # fraction, e.g. 0.18
    last_updated: str = ""

    @property
    def vat_multiplier(self) -> float:
        return 1 + self.vat_rate

    def get_plan(self, plan_id: str) -> Optional[ElectricityPlan]:
        return next((plan for plan in self.plans if plan.id == plan_id), None)

    @property
    def smart_meter_plans(self) -> tuple[ElectricityPlan, ...]:
        return tuple(plan for plan in self.plans if plan.requires_smart_meter)

    @property
    def non_smart_meter_plans(self) -> tuple[ElectricityPlan, ...]:
        return tuple(plan for plan in self.plans if not plan.requires_smart_meter)

    @property
    def providers(self) -> list[str]:
        return list(dict.fromkeys(plan.provider for plan in self.plans))


@dataclass(frozen=True, slots=True)
class UsageBreakdown:
    """Discounted vs. regular usage for one plan, before VAT."""

    discounted_kwh: float
    discounted_savings: float
    regular_kwh: float
    total_kwh: float


@dataclass(frozen=True, slots=True)
class ResultBreakdown:
    """Per-category usage and VAT-inclusive cost of a PlanResult."""

    discounted_usage_kwh: float
    discounted_cost: float
    discounted_savings: float
    regular_usage_kwh: float
    regular_cost: float


@dataclass(frozen=True, slots=True)
class PlanResult:
    """Cost of one plan for one usage data set. Currency amounts include VAT."""

    plan: ElectricityPlan
    total_usage_kwh: float
    baseline_cost: float
    discounted_cost: float
    savings: float
    savings_percent: float
    savings_capped: bool
    breakdown: ResultBreakdown
    uncapped_savings: Optional[float] = None
