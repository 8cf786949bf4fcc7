"""Errors reported to users while reading and checking usage files."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ParseErrorKind(str, Enum):
    """Why a usage file could not be parsed."""

    NO_DATA_SECTION = "no_data_section"
    NO_VALID_RECORDS = "no_valid_records"
    MALFORMED_CSV = "malformed_csv"
    FILE_TOO_SHORT = "file_too_short"
    UNKNOWN_PARSE_FAILURE = "unknown_parse_failure"


class ValidationErrorKind(str, Enum):
    """Why parsed usage data is not sufficient for a calculation."""

    INSUFFICIENT_RECORDS = "insufficient_records"
    INSUFFICIENT_DATE_RANGE = "insufficient_date_range"


class UsageDataError(Exception):
    """
    Base exception for usage file errors.

    Carries an English and a Hebrew message; callers choose which to show.
    """

    def __init__(self, kind: Enum, message: str, message_he: str):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.message_he = message_he

    def message_for(self, language: Optional[str]) -> str:
        """Return the message for a language code ("he", "he-il", "en", ...)."""
        if language and language.lower().startswith("he"):
            return self.message_he
        return self.message


class ParseError(UsageDataError):
    """Raised when a usage file cannot be turned into usage records."""

    def __init__(
        self,
        kind: ParseErrorKind,
        message: str,
        message_he: str,
        row: Optional[int] = None,
    ):
        super().__init__(kind, message, message_he)
        self.row = row

    @classmethod
    def no_data_section(cls) -> ParseError:
        return cls(
            ParseErrorKind.NO_DATA_SECTION,
            "Could not find usage data in file",
            "לא נמצאו נתוני צריכה בקובץ",
        )

    @classmethod
    def no_valid_records(cls) -> ParseError:
        return cls(
            ParseErrorKind.NO_VALID_RECORDS,
            "No valid usage records found in file",
            "לא נמצאו רשומות צריכה תקינות בקובץ",
        )

    @classmethod
    def file_too_short(cls) -> ParseError:
        return cls(
            ParseErrorKind.FILE_TOO_SHORT,
            "File too short - does not appear to be a valid IEC usage file",
            "הקובץ קצר מדי - לא נראה כקובץ צריכה תקין של חברת החשמל",
        )

    @classmethod
    def malformed_csv(cls, detail: str, row: Optional[int] = None) -> ParseError:
        return cls(
            ParseErrorKind.MALFORMED_CSV,
            f"CSV parsing error: {detail}",
            f"שגיאה בקריאת הקובץ: {detail}",
            row=row,
        )

    @classmethod
    def unknown(cls, detail: str) -> ParseError:
        return cls(
            ParseErrorKind.UNKNOWN_PARSE_FAILURE,
            f"Error parsing file: {detail}",
            f"שגיאה בעיבוד הקובץ: {detail}",
        )


class UsageValidationError(UsageDataError):
    """Raised when parsed usage data is too small for a meaningful comparison."""

    def __init__(self, kind: ValidationErrorKind, message: str, message_he: str, count: int):
        super().__init__(kind, message, message_he)
        self.count = count

    @classmethod
    def insufficient_records(cls, count: int) -> UsageValidationError:
        return cls(
            ValidationErrorKind.INSUFFICIENT_RECORDS,
            f"File contains only {count} records. "
            "For accurate analysis, we recommend at least 1 month of data.",
            f"הקובץ מכיל רק {count} רשומות. לניתוח מדויק, מומלץ להעלות לפחות חודש של נתונים.",
            count,
        )

    @classmethod
    def insufficient_date_range(cls, days: int) -> UsageValidationError:
        return cls(
            ValidationErrorKind.INSUFFICIENT_DATE_RANGE,
            f"File contains only {days} days of data. "
            "For accurate analysis, we recommend at least 1 month of data.",
            f"הקובץ מכיל רק {days} ימים של נתונים. לניתוח מדויק, מומלץ להעלות לפחות חודש של נתונים.",
            days,
        )
