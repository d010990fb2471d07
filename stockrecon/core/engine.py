# stockrecon/core/engine.py

"""
Reconciliation engine entry point.

Runs the whole pipeline over two already-extracted record sets:
1. Deduplicate each side independently
2. Pair records by key (full outer)
3. Compute null-safe differences per pair
4. Classify every record
5. Collect diagnostics and a summary

Schema errors (missing key columns) propagate. Data-quality problems become
diagnostics on the result.
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Iterable, Optional, Sequence, Union
import logging

from stockrecon.config import get_settings
from stockrecon.core.classification import classify_status
from stockrecon.core.comparison import check_labels, compare_fields
from stockrecon.core.dedup import DeduplicatedRecords, KeepPolicy, Priority, deduplicate
from stockrecon.core.keys import key_sort_token
from stockrecon.core.matching import pair_records
from stockrecon.errors import TypeMismatchError
from stockrecon.models import (
    Diagnostic,
    FieldPair,
    IndeterminateStatusWarning,
    KeySpec,
    MatchStatus,
    Record,
    ReconciledRecord,
    ReconciliationSummary,
    Side,
    TypeMismatchWarning,
    UnmatchedFieldWarning,
)

logger = logging.getLogger(__name__)

RecordSource = Union[Iterable[Record], DeduplicatedRecords]


class ReconciliationResult:
    """Result of a reconciliation run."""

    def __init__(self, key_spec: KeySpec, field_pairs: Sequence[FieldPair]):
        self.key_spec = key_spec
        self.field_pairs = list(field_pairs)
        self.carry: list[FieldPair] = []
        self.records: list[ReconciledRecord] = []
        self.diagnostics: list[Diagnostic] = []
        self.summary: Optional[ReconciliationSummary] = None
        self.duration_ms: int = 0

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)

    @property
    def diagnostics_count(self) -> int:
        return len(self.diagnostics)

    @property
    def has_diagnostics(self) -> bool:
        return bool(self.diagnostics)

    def by_status(self) -> dict[MatchStatus, list[ReconciledRecord]]:
        """Group records by match status."""
        grouped: dict[MatchStatus, list[ReconciledRecord]] = {status: [] for status in MatchStatus}
        for record in self.records:
            grouped[record.status].append(record)
        return grouped

    def diagnostics_by_kind(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for diagnostic in self.diagnostics:
            counts[diagnostic.kind] = counts.get(diagnostic.kind, 0) + 1
        return counts

    def to_dict(self, include_records: bool = True) -> dict:
        """Convert to dictionary for API response."""
        payload = {
            "summary": self.summary.model_dump() if self.summary else None,
            "diagnostics_count": self.diagnostics_count,
            "diagnostics_by_kind": self.diagnostics_by_kind(),
            "diagnostics": [d.model_dump(mode="json") for d in self.diagnostics],
            "key": self.key_spec.columns,
            "fields": [pair.label for pair in self.field_pairs],
            "duration_ms": self.duration_ms,
        }
        if include_records:
            payload["records"] = [r.model_dump(mode="json") for r in self.records]
        return payload


def reconcile(
    left: RecordSource,
    right: RecordSource,
    key_spec: KeySpec,
    field_pairs: Sequence[FieldPair],
    *,
    carry: Sequence[FieldPair] = (),
    keep: Optional[KeepPolicy] = None,
    left_priority: Optional[Priority] = None,
    right_priority: Optional[Priority] = None,
    uncomparable_as_match: Optional[bool] = None,
    max_workers: Optional[int] = None,
    sort_output: Optional[bool] = None,
) -> ReconciliationResult:
    """
    Reconcile two record sets keyed by ``key_spec``.

    ``field_pairs`` is the alias table of numeric fields to compare, ``carry``
    lists descriptive fields copied onto each output record (left value
    preferred). Options left as None fall back to settings.
    Two pairs sharing an output label raise DuplicateFieldLabelError.
    """
    settings = get_settings()
    keep = keep or settings.dedup_keep
    if uncomparable_as_match is None:
        uncomparable_as_match = settings.uncomparable_as_match
    if max_workers is None:
        max_workers = settings.max_workers
    if sort_output is None:
        sort_output = settings.sort_output

    check_labels(field_pairs)
    check_labels(carry)

    start_time = datetime.now()
    result = ReconciliationResult(key_spec, field_pairs)
    result.carry = list(carry)

    # ============================================
    # Deduplicate each side
    # ============================================
    left_raw = left if isinstance(left, DeduplicatedRecords) else list(left)
    right_raw = right if isinstance(right, DeduplicatedRecords) else list(right)

    left_set = deduplicate(left_raw, key_spec, side="left", keep=keep, priority=left_priority)
    right_set = deduplicate(right_raw, key_spec, side="right", keep=keep, priority=right_priority)

    result.diagnostics.extend(left_set.warnings)
    result.diagnostics.extend(right_set.warnings)
    result.diagnostics.extend(_unmatched_field_warnings(left_set, right_set, field_pairs, carry))

    # ============================================
    # Pair, compare, classify
    # ============================================
    paired = pair_records(left_set, right_set, carry=carry)

    def evaluate(record: ReconciledRecord) -> list[Diagnostic]:
        return _evaluate_record(record, field_pairs, uncomparable_as_match)

    if max_workers > 1 and len(paired) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            per_record = list(executor.map(evaluate, paired))
    else:
        per_record = [evaluate(record) for record in paired]

    for found in per_record:
        result.diagnostics.extend(found)

    if sort_output:
        paired.sort(key=lambda record: key_sort_token(record.key))
    result.records = paired

    # ============================================
    # Summary
    # ============================================
    counts = {status: 0 for status in MatchStatus}
    for record in paired:
        counts[record.status] += 1

    both_sides = counts[MatchStatus.MATCH] + counts[MatchStatus.MISMATCH] + counts[MatchStatus.INDETERMINATE]
    result.summary = ReconciliationSummary(
        left_records=_input_count(left_raw),
        right_records=_input_count(right_raw),
        left_duplicates_discarded=left_set.total_discarded,
        right_duplicates_discarded=right_set.total_discarded,
        total_keys=len(paired),
        matched=counts[MatchStatus.MATCH],
        mismatched=counts[MatchStatus.MISMATCH],
        left_only=counts[MatchStatus.LEFT_ONLY],
        right_only=counts[MatchStatus.RIGHT_ONLY],
        indeterminate=counts[MatchStatus.INDETERMINATE],
        diagnostics_count=len(result.diagnostics),
        match_rate=(counts[MatchStatus.MATCH] / both_sides * 100) if both_sides else 0,
    )
    result.duration_ms = int((datetime.now() - start_time).total_seconds() * 1000)

    _log_outcome(result, settings.max_diagnostics_logged)
    return result


def _evaluate_record(
    record: ReconciledRecord,
    field_pairs: Sequence[FieldPair],
    uncomparable_as_match: bool,
) -> list[Diagnostic]:
    """Fill differences and status of one record, returning its diagnostics."""
    found: list[Diagnostic] = []

    differences, errors = compare_fields(field_pairs, record.left_fields, record.right_fields)
    record.differences = differences
    for error in errors:
        found.append(_type_mismatch_warning(record, error))

    record.status = classify_status(record, field_pairs, uncomparable_as_match=uncomparable_as_match)

    if record.status == MatchStatus.INDETERMINATE:
        found.append(
            IndeterminateStatusWarning(
                message=f"Key {record.key!r} exists on both sides but no field could be compared",
                key=record.key,
            )
        )
    return found


def _input_count(records: Union[list, DeduplicatedRecords]) -> int:
    if isinstance(records, DeduplicatedRecords):
        return len(records) + records.total_discarded
    return len(records)


def _type_mismatch_warning(record: ReconciledRecord, error: TypeMismatchError) -> TypeMismatchWarning:
    return TypeMismatchWarning(
        message=str(error),
        key=record.key,
        field=error.field,
    )


def _unmatched_field_warnings(
    left_set: DeduplicatedRecords,
    right_set: DeduplicatedRecords,
    field_pairs: Sequence[FieldPair],
    carry: Sequence[FieldPair],
) -> list[UnmatchedFieldWarning]:
    """Warn about designated fields that never appear in a non-empty side."""
    warnings: list[UnmatchedFieldWarning] = []
    sides: list[tuple[Side, DeduplicatedRecords, set[str]]] = [
        ("left", left_set, left_set.fields),
        ("right", right_set, right_set.fields),
    ]

    for side, records, seen in sides:
        if not len(records):
            continue
        for pair in list(field_pairs) + list(carry):
            name = pair.left if side == "left" else pair.right
            if name not in seen:
                warnings.append(
                    UnmatchedFieldWarning(
                        message=f"Field '{name}' ({pair.label}) is not present in any {side} record",
                        side=side,
                        field=name,
                    )
                )
    return warnings


def _log_outcome(result: ReconciliationResult, limit: int) -> None:
    summary = result.summary
    logger.info(
        f"Reconciled {summary.total_keys} keys in {result.duration_ms}ms: "
        f"{summary.matched} match, {summary.mismatched} mismatch, "
        f"{summary.left_only} left-only, {summary.right_only} right-only, "
        f"{summary.indeterminate} indeterminate"
    )

    if not result.diagnostics:
        return

    logger.warning(f"Reconciliation produced {result.diagnostics_count} diagnostic(s): {result.diagnostics_by_kind()}")
    for diagnostic in result.diagnostics[:limit]:
        logger.warning(f"[{diagnostic.kind}] {diagnostic.message}")
    if result.diagnostics_count > limit:
        logger.warning(f"... {result.diagnostics_count - limit} more diagnostic(s) not shown")
