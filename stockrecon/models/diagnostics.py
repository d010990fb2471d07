# stockrecon/models/diagnostics.py

"""
Data-quality diagnostics collected during a reconciliation run.

These are returned alongside the result and never raised. Each subclass pins
its ``kind`` so callers can filter without isinstance checks after a JSON
round-trip.
"""

from typing import Literal, Optional

from pydantic import BaseModel, field_serializer

from stockrecon.models.record import FieldValue, Side, json_value

DiagnosticKind = Literal[
    "duplicate_key",
    "type_mismatch",
    "indeterminate_status",
    "unmatched_field",
]

DiagnosticSeverity = Literal["warning", "info"]


class Diagnostic(BaseModel):
    """Base diagnostic."""

    kind: DiagnosticKind
    severity: DiagnosticSeverity = "warning"
    message: str
    key: Optional[tuple[FieldValue, ...]] = None
    side: Optional[Side] = None
    field: Optional[str] = None
    count: int = 1

    @field_serializer("key", when_used="json")
    def _dump_key(self, key: Optional[tuple]) -> Optional[list]:
        return None if key is None else [json_value(value) for value in key]


class DuplicateKeyWarning(Diagnostic):
    """Records discarded by the deduplicator for one key."""

    kind: Literal["duplicate_key"] = "duplicate_key"


class TypeMismatchWarning(Diagnostic):
    """A compared pair held values that could not be subtracted."""

    kind: Literal["type_mismatch"] = "type_mismatch"


class IndeterminateStatusWarning(Diagnostic):
    """Both sides exist but no designated field could be compared."""

    kind: Literal["indeterminate_status"] = "indeterminate_status"


class UnmatchedFieldWarning(Diagnostic):
    """A designated field never appears in one side's schema."""

    kind: Literal["unmatched_field"] = "unmatched_field"
