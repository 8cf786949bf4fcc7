"""
CSV parsing service for smart meter usage exports.

Provides UsageCSVParser for turning an IEC-style meter export into
ParsedUsageData. The export starts with a variable block of metadata rows
(customer name and address, meter code/number/contract) followed by a header
row and 15-minute data rows of the form DD/MM/YYYY,HH:MM,kWh.
"""

import csv
import io
import logging
import re
from datetime import date, datetime
from typing import Optional

from usage.exceptions import ParseError
from usage.types import ParsedUsageData, UsageRecord, UsageResult

logger = logging.getLogger(__name__)

DATE_PATTERN = re.compile(r"^\d{2}/\d{2}/\d{4}$")
TIME_PATTERN = re.compile(r"^\d{2}:\d{2}$")
KWH_PATTERN = re.compile(r"^([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")
METER_CODE_PATTERN = re.compile(r"^\d+$")
# Hebrew or Latin letters
NAME_PATTERN = re.compile(r"[A-Za-z\u0590-\u05FF]")

CUSTOMER_HEADER_LABELS = {"שם לקוח", "customer name"}
METER_HEADER_LABELS = {"קוד מונה", "meter code"}
DATE_HEADER_LABELS = {"תאריך", "date"}

MIN_ROWS = 10
METADATA_SCAN_ROWS = 10
MAX_METER_CODE_LENGTH = 6


def clean_cell(value: str) -> str:
    """Strip surrounding quotes and whitespace from a cell."""
    return value.strip().strip("\"'").strip()


def parse_kwh(value: str) -> float:
    """
    Parse a usage value that may use a comma or a period as decimal separator.

    Leading numeric text is used ("1.5kWh" -> 1.5, "1.5E-02" -> 0.015); values
    without a leading number are treated as 0. Negative readings are clamped to 0.
    """
    match = KWH_PATTERN.match(value.replace(",", ".", 1).strip())
    if match is None:
        return 0.0
    return max(0.0, float(match.group(1)))


def parse_date(value: str) -> date:
    """Parse a DD/MM/YYYY date. Raises ValueError for impossible dates."""
    return datetime.strptime(value, "%d/%m/%Y").date()


class UsageCSVParser:
    """Parse a meter usage export into a validated time series."""

    def __init__(self, csv_content: str):
        """
        Initialize parser with CSV content.

        Args:
            csv_content: Raw text of the export file
        """
        self.csv_content = csv_content

    def parse(self) -> UsageResult:
        """
        Parse the export.

        Never raises: every failure, expected or not, is returned as a
        ParseError on the result.

        Returns:
            UsageResult with ParsedUsageData on success or a ParseError
        """
        try:
            return UsageResult(data=self._parse())
        except ParseError as e:
            logger.warning("Usage file rejected (%s): %s", e.kind.value, e.message)
            return UsageResult(error=e)
        except Exception as e:
            logger.exception("Unexpected failure while parsing usage file")
            return UsageResult(error=ParseError.unknown(str(e) or type(e).__name__))

    def _parse(self) -> ParsedUsageData:
        rows = self._tokenize()
        if len(rows) < MIN_ROWS:
            raise ParseError.file_too_short()

        data_start = self._find_data_start(rows)
        if data_start is None:
            raise ParseError.no_data_section()
        logger.debug("Usage data section starts at row %d of %d", data_start + 1, len(rows))

        metadata = self._extract_metadata(rows[:METADATA_SCAN_ROWS])

        records: list[UsageRecord] = []
        min_date: Optional[date] = None
        max_date: Optional[date] = None
        total_kwh = 0.0

        for row in rows[data_start:]:
            record = self._parse_record(row)
            if record is None:
                continue
            records.append(record)
            total_kwh += record.kwh_usage
            if min_date is None or record.date < min_date:
                min_date = record.date
            if max_date is None or record.date > max_date:
                max_date = record.date

        if not records:
            raise ParseError.no_valid_records()

        logger.debug(
            "Parsed %d usage records from %s to %s (%.3f kWh)",
            len(records),
            min_date,
            max_date,
            total_kwh,
        )

        return ParsedUsageData(
            customer_name=metadata["customer_name"],
            address=metadata["address"],
            meter_code=metadata["meter_code"],
            meter_number=metadata["meter_number"],
            contract_number=metadata["contract_number"],
            records=tuple(records),
            start_date=min_date,
            end_date=max_date,
            total_kwh=total_kwh,
        )

    def _tokenize(self) -> list[list[str]]:
        """
        Split content into rows of cells, dropping empty lines.

        Raises:
            ParseError: If the CSV syntax is invalid
        """
        reader = csv.reader(io.StringIO(self.csv_content, newline=""), strict=True)
        rows: list[list[str]] = []
        try:
            for row in reader:
                if not row or all(not cell.strip() for cell in row):
                    continue
                rows.append(row)
        except csv.Error as e:
            raise ParseError.malformed_csv(str(e), row=reader.line_num) from e
        return rows

    def _find_data_start(self, rows: list[list[str]]) -> Optional[int]:
        """
        Find the index of the first data row.

        Looks for the date column header first (data begins on the next row),
        then falls back to the first row starting with a DD/MM/YYYY date.
        """
        for i, row in enumerate(rows):
            first_cell = clean_cell(row[0]).lower()
            if first_cell in DATE_HEADER_LABELS or "תאריך" in first_cell:
                return i + 1

        for i, row in enumerate(rows):
            if DATE_PATTERN.match(clean_cell(row[0])):
                return i

        return None

    def _extract_metadata(self, rows: list[list[str]]) -> dict[str, str]:
        """
        Discover customer and meter details in the first rows of the file.

        Header rows, including any row labelled with a date header, are skipped;
        data rows match neither rule below.

        A row whose first cell holds letters and whose second cell is non-empty
        is the customer name/address row; a row whose first cell is a short
        number is the meter code/number/contract row. Later matches win.
        """
        metadata = {
            "customer_name": "",
            "address": "",
            "meter_code": "",
            "meter_number": "",
            "contract_number": "",
        }

        for row in rows:
            if len(row) < 2:
                continue

            first_cell = clean_cell(row[0])
            second_cell = clean_cell(row[1])
            label = first_cell.lower()

            if label in CUSTOMER_HEADER_LABELS or label in METER_HEADER_LABELS:
                continue
            if label in DATE_HEADER_LABELS or "תאריך" in label:
                continue

            if first_cell and NAME_PATTERN.search(first_cell) and second_cell:
                metadata["customer_name"] = first_cell
                metadata["address"] = second_cell

            if METER_CODE_PATTERN.match(first_cell) and len(first_cell) <= MAX_METER_CODE_LENGTH:
                metadata["meter_code"] = first_cell
                metadata["meter_number"] = second_cell
                metadata["contract_number"] = clean_cell(row[2]) if len(row) > 2 else ""

        return metadata

    def _parse_record(self, row: list[str]) -> Optional[UsageRecord]:
        """Return a UsageRecord for a data row, or None if the row is not data."""
        if len(row) < 3:
            return None

        date_str = clean_cell(row[0])
        time_str = clean_cell(row[1])

        if not DATE_PATTERN.match(date_str) or not TIME_PATTERN.match(time_str):
            return None

        try:
            record_date = parse_date(date_str)
        except ValueError:
            # e.g. 31/02/2024
            return None

        return UsageRecord(
            date=record_date,
            time=time_str,
            kwh_usage=parse_kwh(clean_cell(row[2])),
        )


def parse_usage_csv(csv_content: str) -> UsageResult:
    """Parse a usage export. See UsageCSVParser.parse."""
    return UsageCSVParser(csv_content).parse()
