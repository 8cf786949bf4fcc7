"""
Project-wide test fixtures.

Builds meter export files in the layout produced by the utility's customer
portal: a metadata block, a header row and 15-minute data rows.
"""

from datetime import date, datetime, timedelta

import pytest


def build_meter_csv(
    readings,
    customer_name="Dana Levi",
    address="12 Herzl St Tel Aviv",
    meter_code="123",
    meter_number="87654321",
    contract_number="555000",
):
    """Render (date, "HH:MM", kwh) readings as a meter export."""
    lines = [
        "שם לקוח,כתובת",
        f'"{customer_name}","{address}"',
        "",
        "קוד מונה,מספר מונה,מספר חוזה",
        f"{meter_code},{meter_number},{contract_number}",
        "",
        "תאריך,מועד תחילת הפעימה,צריכה",
    ]
    lines += [f"{day:%d/%m/%Y},{time},{kwh}" for day, time, kwh in readings]
    return "\n".join(lines) + "\n"


def interval_readings(start=date(2024, 1, 7), count=200, kwh=0.5, minutes=15):
    """Consecutive readings from midnight of start."""
    moment = datetime.combine(start, datetime.min.time())
    readings = []
    for _ in range(count):
        readings.append((moment.date(), moment.strftime("%H:%M"), kwh))
        moment += timedelta(minutes=minutes)
    return readings


@pytest.fixture
def meter_csv():
    """Factory fixture returning meter export text.

    Accepts the interval_readings() arguments plus any build_meter_csv()
    metadata keyword.
    """

    def _create_meter_csv(readings=None, **kwargs):
        reading_kwargs = {
            key: kwargs.pop(key) for key in ("start", "count", "kwh", "minutes") if key in kwargs
        }
        if readings is None:
            readings = interval_readings(**reading_kwargs)
        return build_meter_csv(readings, **kwargs)

    return _create_meter_csv
