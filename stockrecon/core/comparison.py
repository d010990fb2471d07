# stockrecon/core/comparison.py

"""
Null-safe field differences.

A difference exists only when both sides hold a present value. Anything else
(missing side, missing field, None value) yields None, never 0, so a consumer
can tell "no comparable data" from "compared equal".
"""

from decimal import Decimal
from typing import Any, Optional, Sequence

from stockrecon.errors import DuplicateFieldLabelError, TypeMismatchError
from stockrecon.models import FieldPair, Number, Record


def check_labels(field_pairs: Sequence[FieldPair]) -> None:
    """Raise DuplicateFieldLabelError when two pairs share an output label."""
    seen: set[str] = set()
    for pair in field_pairs:
        if pair.label in seen:
            raise DuplicateFieldLabelError(pair.label)
        seen.add(pair.label)


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def align_numbers(left: Number, right: Number) -> tuple[Number, Number]:
    """Make a float usable next to a Decimal (through str, keeping printed digits)."""
    if isinstance(left, Decimal) and isinstance(right, float):
        return left, Decimal(str(right))
    if isinstance(left, float) and isinstance(right, Decimal):
        return Decimal(str(left)), right
    return left, right


def add_numbers(total: Number, value: Number) -> Number:
    total, value = align_numbers(total, value)
    return total + value


def difference(left_value: Any, right_value: Any, field: Optional[str] = None) -> Optional[Number]:
    """
    Signed difference left - right.

    Returns None when either value is missing. Raises TypeMismatchError when
    both are present but not both numeric.
    """
    if left_value is None or right_value is None:
        return None

    if not (is_number(left_value) and is_number(right_value)):
        raise TypeMismatchError(left_value, right_value, field)

    left_value, right_value = align_numbers(left_value, right_value)
    return left_value - right_value


def compare_fields(
    field_pairs: Sequence[FieldPair],
    left_fields: Optional[Record],
    right_fields: Optional[Record],
) -> tuple[dict[str, Optional[Number]], list[TypeMismatchError]]:
    """
    Compute one difference entry per designated field pair.

    A whole side being absent is treated like a missing value on every field.
    Type mismatches do not abort: the entry becomes None and the error is
    returned for the caller to record.
    """
    differences: dict[str, Optional[Number]] = {}
    errors: list[TypeMismatchError] = []

    for pair in field_pairs:
        lhs = left_fields.get(pair.left) if left_fields is not None else None
        rhs = right_fields.get(pair.right) if right_fields is not None else None
        try:
            differences[pair.label] = difference(lhs, rhs, pair.label)
        except TypeMismatchError as exc:
            differences[pair.label] = None
            errors.append(exc)

    return differences, errors
