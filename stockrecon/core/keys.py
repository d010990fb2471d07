# stockrecon/core/keys.py

"""
Business key extraction.

A key is the ordered tuple of the designated key components. A component whose
value is missing stays None in its slot and is a valid, matchable value.
"""

from typing import Any, Sequence

from stockrecon.core.normalizers import normalize_key_component
from stockrecon.errors import KeyConflictError, MissingKeyFieldError
from stockrecon.models import Key, Record


def normalize_key(
    record: Record,
    columns: Sequence[str],
    *,
    trim: bool = False,
    case_insensitive: bool = False,
) -> Key:
    """
    Extract the key tuple of a record.

    Raises MissingKeyFieldError when a key column is not in the record at all.
    A column that is present with a None value is fine.
    """
    key = []
    for column in columns:
        if column not in record:
            raise MissingKeyFieldError(column, list(record))
        key.append(
            normalize_key_component(record[column], trim=trim, case_insensitive=case_insensitive)
        )
    return tuple(key)


def coalesce_key(left: Key | None, right: Key | None) -> Key:
    """
    Combine the two sides' keys, preferring left components.

    Keys paired by the reconciler are equal, so a conflict here means the
    caller paired records that do not belong together.
    """
    if left is None and right is None:
        raise ValueError("At least one side must provide a key")
    if left is None:
        return tuple(right)
    if right is None:
        return tuple(left)
    if len(left) != len(right):
        raise ValueError(f"Key arity differs: {len(left)} != {len(right)}")

    merged = []
    for position, (lhs, rhs) in enumerate(zip(left, right)):
        if lhs is not None and rhs is not None and lhs != rhs:
            raise KeyConflictError(position, lhs, rhs)
        merged.append(lhs if lhs is not None else rhs)
    return tuple(merged)


def _component_token(value: Any) -> tuple:
    # None sorts after every present value; values of different types are
    # ordered by type name so mixed columns still sort deterministically.
    if value is None:
        return (1, "", "")
    return (0, type(value).__name__, value)


def key_sort_token(key: Key) -> tuple:
    """Sort key giving a total order over keys with None and mixed types."""
    return tuple(_component_token(component) for component in key)
