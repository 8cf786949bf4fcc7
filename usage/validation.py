"""
Sufficiency checks for parsed usage data.
"""

from usage.exceptions import UsageValidationError
from usage.types import ParsedUsageData, UsageResult

MIN_RECORDS = 100
MIN_DAYS = 7


def check_usage_data(data: ParsedUsageData) -> None:
    """
    Check that usage data is large enough for a meaningful comparison.

    The record count is checked before the date range.

    Raises:
        UsageValidationError: If there are fewer than MIN_RECORDS records or the
            data spans fewer than MIN_DAYS days
    """
    if len(data.records) < MIN_RECORDS:
        raise UsageValidationError.insufficient_records(len(data.records))

    if data.days_observed < MIN_DAYS:
        raise UsageValidationError.insufficient_date_range(data.days_observed)


def validate_usage_data(data: ParsedUsageData) -> UsageResult:
    """
    Validate usage data without raising.

    Returns:
        UsageResult carrying the same data on success, or the UsageValidationError
    """
    try:
        check_usage_data(data)
    except UsageValidationError as e:
        return UsageResult(error=e)
    return UsageResult(data=data)
