"""Custom exceptions for billing services."""


class BillingServiceError(Exception):
    """Base exception for billing service errors."""

    pass


class CatalogError(BillingServiceError):
    """Raised when a plan catalog cannot be loaded."""

    def __init__(self, message: str, plan_id: str | None = None):
        super().__init__(f"{plan_id}: {message}" if plan_id else message)
        self.plan_id = plan_id
