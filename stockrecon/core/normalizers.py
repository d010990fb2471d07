# stockrecon/core/normalizers.py

"""
Value normalization for extracted records.

Ensures consistent typed values regardless of source. Missing values always
come back as None; nothing here turns a missing value into 0 or "".
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Literal, Optional
import logging
import re

logger = logging.getLogger(__name__)

ColumnType = Literal["text", "int", "decimal", "date"]

DEFAULT_NULL_VALUES = ("", "NULL", "null", "None", "N/A", "NA")

THOUSANDS_PATTERN = re.compile(r'[+-]?\d{1,3}(,\d{3})+(\.\d+)?')


def is_missing(value: Any, null_values: Iterable[str] = DEFAULT_NULL_VALUES) -> bool:
    """True for None and for text that only spells out a null token."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() in set(null_values)
    return False


def normalize_decimal(value: Any) -> Optional[Decimal]:
    """
    Normalize a numeric value to Decimal.

    Handles:
    - Decimal, int and float (floats go through str to keep the printed digits)
    - Strings with currency symbols and comma thousands separators

    Raises ValueError when text holds no number, or uses commas other than as
    thousands separators ("1.234,56", "1,5").
    """
    if value is None:
        return None

    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")

    if isinstance(value, Decimal):
        return value

    if isinstance(value, (int, float)):
        return Decimal(str(value))

    if isinstance(value, str):
        # Remove currency symbols and whitespace
        cleaned = re.sub(r'[^\d.,eE+-]', '', value)
        if ',' in cleaned:
            if not THOUSANDS_PATTERN.fullmatch(cleaned):
                raise ValueError(f"Ambiguous number: {value!r}")
            cleaned = cleaned.replace(',', '')
        try:
            return Decimal(cleaned)
        except InvalidOperation:
            raise ValueError(f"Not a number: {value!r}") from None

    raise ValueError(f"Not a number: {value!r}")


def normalize_int(value: Any) -> Optional[int]:
    """Normalize to int, accepting integral decimals such as "10.0"."""
    if value is None:
        return None

    if isinstance(value, int) and not isinstance(value, bool):
        return value

    number = normalize_decimal(value)
    if number != number.to_integral_value():
        raise ValueError(f"Not an integer: {value!r}")
    return int(number)


def normalize_date(d: Any) -> date | None:
    """
    Normalize date to date object.

    Handles:
    - date objects
    - datetime objects
    - ISO strings
    - Common day/month/year layouts
    """
    if d is None:
        return None

    if isinstance(d, datetime):
        return d.date()

    if isinstance(d, date):
        return d

    if isinstance(d, str):
        text = d.strip()
        # Try ISO format first
        try:
            return datetime.fromisoformat(text.replace('Z', '+00:00')).date()
        except ValueError:
            pass

        # Try common formats
        formats = [
            '%Y-%m-%d',
            '%m/%d/%Y',
            '%d/%m/%Y',
            '%Y/%m/%d',
            '%d.%m.%Y',
        ]
        for fmt in formats:
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue

    raise ValueError(f"Not a date: {d!r}")


def normalize_key_component(value: Any, *, trim: bool = False, case_insensitive: bool = False) -> Any:
    """
    Canonicalize one key component.

    Only text is touched: surrounding whitespace is stripped with ``trim`` and
    the value is casefolded with ``case_insensitive``. None passes through.
    """
    if not isinstance(value, str):
        return value

    if trim:
        value = value.strip()
    if case_insensitive:
        value = value.casefold()
    return value


def coerce_value(
    value: Any,
    column_type: ColumnType = "text",
    null_values: Iterable[str] = DEFAULT_NULL_VALUES,
) -> Any:
    """
    Coerce a raw extracted value to the requested column type.

    Null tokens become None. A value that does not parse is kept as text so the
    comparator can report it as a type mismatch instead of silently dropping it.
    """
    if is_missing(value, null_values):
        return None

    try:
        if column_type == "int":
            return normalize_int(value)
        if column_type == "decimal":
            return normalize_decimal(value)
        if column_type == "date":
            return normalize_date(value)
    except ValueError:
        logger.debug(f"Keeping unparsable {column_type} value as text: {value!r}")
        return value.strip() if isinstance(value, str) else value

    return value
