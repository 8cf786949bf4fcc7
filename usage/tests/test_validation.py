"""
Tests for usage data sufficiency checks.
"""

import pytest

from usage.csv_service import parse_usage_csv
from usage.exceptions import UsageValidationError, ValidationErrorKind
from usage.validation import check_usage_data, validate_usage_data


@pytest.fixture
def parsed(meter_csv):
    def _parse(**kwargs):
        return parse_usage_csv(meter_csv(**kwargs)).data

    return _parse


def test_too_few_records(parsed):
    """
    99 readings are rejected even when they span weeks.
    """
    data = parsed(count=99, minutes=24 * 60)

    result = validate_usage_data(data)

    assert not result.success
    assert result.error.kind == ValidationErrorKind.INSUFFICIENT_RECORDS
    assert result.error.count == 99
    assert "99" in result.error.message
    assert "99" in result.error.message_he


def test_minimum_records_accepted(parsed):
    data = parsed(count=100, minutes=120)

    result = validate_usage_data(data)

    assert result.success
    assert result.data is data


def test_short_date_range(parsed):
    """
    200 readings every 45 minutes span 6 days.
    """
    data = parsed(count=200, minutes=45)

    result = validate_usage_data(data)

    assert result.error.kind == ValidationErrorKind.INSUFFICIENT_DATE_RANGE
    assert result.error.count == 6


def test_exactly_seven_days_accepted(parsed):
    data = parsed(count=169, minutes=60)

    assert data.days_observed == 7
    assert validate_usage_data(data).success


def test_record_count_checked_first(parsed):
    data = parsed(count=10)

    with pytest.raises(UsageValidationError) as excinfo:
        check_usage_data(data)

    assert excinfo.value.kind == ValidationErrorKind.INSUFFICIENT_RECORDS
