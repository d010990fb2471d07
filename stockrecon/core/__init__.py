# stockrecon/core/__init__.py

from stockrecon.core.engine import reconcile, ReconciliationResult
from stockrecon.core.aggregation import aggregate
from stockrecon.core.dedup import deduplicate, DeduplicatedRecords
from stockrecon.core.matching import pair_records
from stockrecon.core.comparison import check_labels, compare_fields, difference
from stockrecon.core.classification import classify_status
from stockrecon.core.keys import normalize_key, coalesce_key, key_sort_token
from stockrecon.core.normalizers import (
    coerce_value,
    is_missing,
    normalize_date,
    normalize_decimal,
    normalize_int,
)

__all__ = [
    "reconcile",
    "ReconciliationResult",
    "aggregate",
    "deduplicate",
    "DeduplicatedRecords",
    "pair_records",
    "check_labels",
    "compare_fields",
    "difference",
    "classify_status",
    "normalize_key",
    "coalesce_key",
    "key_sort_token",
    "coerce_value",
    "is_missing",
    "normalize_date",
    "normalize_decimal",
    "normalize_int",
]
