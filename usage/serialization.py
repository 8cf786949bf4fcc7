"""
Serialization of usage data for caching and storage layers.

Dates are written as ISO-8601 strings. On input, full ISO timestamps are
accepted as well and reduced to their calendar date.
"""

import json
from dataclasses import asdict
from typing import Any

from dateutil import parser as dateutil_parser
from django.core.serializers.json import DjangoJSONEncoder

from usage.types import ParsedUsageData, UsageRecord


def _parse_iso_date(value: str):
    return dateutil_parser.isoparse(value).date()


def serialize_usage_data(data: ParsedUsageData) -> dict[str, Any]:
    """Convert ParsedUsageData to a JSON-ready dict."""
    return {
        "customer_name": data.customer_name,
        "address": data.address,
        "meter_code": data.meter_code,
        "meter_number": data.meter_number,
        "contract_number": data.contract_number,
        "records": [
            {
                "date": record.date.isoformat(),
                "time": record.time,
                "kwh_usage": record.kwh_usage,
            }
            for record in data.records
        ],
        "start_date": data.start_date.isoformat(),
        "end_date": data.end_date.isoformat(),
        "total_kwh": data.total_kwh,
    }


def deserialize_usage_data(payload: dict[str, Any]) -> ParsedUsageData:
    """
    Rebuild ParsedUsageData from serialize_usage_data output.

    Raises:
        KeyError: If a required key is missing
        ValueError: If a date is not ISO-8601
    """
    return ParsedUsageData(
        customer_name=payload.get("customer_name", ""),
        address=payload.get("address", ""),
        meter_code=payload.get("meter_code", ""),
        meter_number=payload.get("meter_number", ""),
        contract_number=payload.get("contract_number", ""),
        records=tuple(
            UsageRecord(
                date=_parse_iso_date(r["date"]),
                time=r["time"],
                kwh_usage=float(r["kwh_usage"]),
            )
            for r in payload["records"]
        ),
        start_date=_parse_iso_date(payload["start_date"]),
        end_date=_parse_iso_date(payload["end_date"]),
        total_kwh=float(payload["total_kwh"]),
    )


def usage_data_to_json(data: ParsedUsageData) -> str:
    """Serialize usage data to a JSON string."""
    return json.dumps(asdict(data), cls=DjangoJSONEncoder, ensure_ascii=False)


def usage_data_from_json(content: str) -> ParsedUsageData:
    """Inverse of usage_data_to_json."""
    return deserialize_usage_data(json.loads(content))
