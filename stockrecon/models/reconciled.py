# stockrecon/models/reconciled.py

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_serializer

from stockrecon.models.record import FieldValue, Number, Record, json_value


# ============================================
# Match status
# ============================================

class MatchStatus(str, Enum):
    MATCH = "Match"
    MISMATCH = "Mismatch"
    LEFT_ONLY = "LeftOnly"
    RIGHT_ONLY = "RightOnly"
    INDETERMINATE = "Indeterminate"


# ============================================
# Reconciled record
# ============================================

class ReconciledRecord(BaseModel):
    """One output row per distinct key across both sides."""

    key: tuple[FieldValue, ...]
    left_fields: Optional[Record] = None
    right_fields: Optional[Record] = None
    attributes: Record = Field(default_factory=dict, description="Carried fields, left value preferred")
    differences: dict[str, Optional[Number]] = Field(default_factory=dict)
    status: Optional[MatchStatus] = None

    @field_serializer("key", when_used="json")
    def _dump_key(self, key: tuple) -> list:
        return [json_value(value) for value in key]

    @field_serializer("left_fields", "right_fields", "attributes", "differences", when_used="json")
    def _dump_fields(self, fields: Optional[dict]) -> Optional[dict]:
        if fields is None:
            return None
        return {name: json_value(value) for name, value in fields.items()}

    @property
    def has_left(self) -> bool:
        return self.left_fields is not None

    @property
    def has_right(self) -> bool:
        return self.right_fields is not None


# ============================================
# Aggregation
# ============================================

class FieldTotals(BaseModel):
    """Per-field totals for one group."""

    left_total: Number = 0
    right_total: Number = 0
    difference: Optional[Number] = Field(
        default=None,
        description="Sum of per-record differences; None when no record was comparable",
    )
    compared: int = 0
    left_unmatched: Number = Field(default=0, description="Left values with no right counterpart")
    right_unmatched: Number = Field(default=0, description="Right values with no left counterpart")

    @field_serializer(
        "left_total", "right_total", "difference", "left_unmatched", "right_unmatched", when_used="json"
    )
    def _dump_number(self, value: Optional[Number]):
        return json_value(value)


class AggregationResult(BaseModel):
    """Totals for one grouping value (empty group is the grand total)."""

    group: tuple[FieldValue, ...] = ()
    group_by: list[str] = Field(default_factory=list)
    record_count: int = 0
    status_counts: dict[MatchStatus, int] = Field(
        default_factory=lambda: {status: 0 for status in MatchStatus}
    )
    fields: dict[str, FieldTotals] = Field(default_factory=dict)

    @field_serializer("group", when_used="json")
    def _dump_group(self, group: tuple) -> list:
        return [json_value(value) for value in group]

    @property
    def is_grand_total(self) -> bool:
        return self.group == ()


# ============================================
# Run summary
# ============================================

class ReconciliationSummary(BaseModel):
    """Summary of a reconciliation run."""

    left_records: int
    right_records: int
    left_duplicates_discarded: int
    right_duplicates_discarded: int
    total_keys: int

    matched: int
    mismatched: int
    left_only: int
    right_only: int
    indeterminate: int

    diagnostics_count: int
    match_rate: float
