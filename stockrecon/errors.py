# stockrecon/errors.py

"""
Exceptions raised by the reconciliation engine.

Schema-level problems (a key field the record does not have, two key specs that
cannot be matched) abort the run. Data-quality problems are never raised to the
caller; they are collected as diagnostics on the result instead.
"""

from typing import Any, Optional


class ReconciliationError(Exception):
    """Base class for all engine errors."""


class MissingKeyFieldError(ReconciliationError):
    """A designated key (or grouping) field is not part of the record schema."""

    def __init__(self, field: str, available: Optional[list[str]] = None):
        self.field = field
        self.available = sorted(available) if available is not None else None
        message = f"Key field '{field}' is not present in the record schema"
        if self.available is not None:
            message += f" (available: {', '.join(self.available) or 'none'})"
        super().__init__(message)


class KeyConflictError(ReconciliationError):
    """Two key components that should be identical disagree."""

    def __init__(self, position: int, left: Any, right: Any):
        self.position = position
        self.left = left
        self.right = right
        super().__init__(
            f"Key component {position} differs between sides: {left!r} != {right!r}"
        )


class TypeMismatchError(ReconciliationError):
    """A compared field pair holds values that cannot be subtracted."""

    def __init__(self, left: Any, right: Any, field: Optional[str] = None):
        self.left = left
        self.right = right
        self.field = field
        where = f" for '{field}'" if field else ""
        super().__init__(
            f"Cannot compare {type(left).__name__} with {type(right).__name__}{where}: "
            f"{left!r} vs {right!r}"
        )


class DuplicateFieldLabelError(ReconciliationError):
    """Two field pairs would write to the same output label."""

    def __init__(self, label: str):
        self.label = label
        super().__init__(f"Field label '{label}' is used by more than one field pair")
