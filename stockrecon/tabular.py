# stockrecon/tabular.py

"""
Row/column serialization for engine input and output.

Input is CSV read into records (empty cells and null tokens become None);
output is flat rows laid out the way stock comparison sheets are usually read:
key columns, carried attributes, then <Left>_<field>, <Right>_<field>,
<field>_Diff per compared field, and Match_Status last.
"""

from pathlib import Path
from typing import IO, Any, Iterable, Mapping, Optional, Sequence, Union
import csv
import logging

from stockrecon.config import get_settings
from stockrecon.core.engine import ReconciliationResult
from stockrecon.core.normalizers import ColumnType, coerce_value
from stockrecon.models import AggregationResult, MatchStatus, Record

logger = logging.getLogger(__name__)

Source = Union[str, Path, IO[str]]

STATUS_COLUMN = "Match_Status"


# ============================================
# Input
# ============================================

def read_records(
    source: Source,
    *,
    types: Optional[Mapping[str, ColumnType]] = None,
    null_values: Optional[Iterable[str]] = None,
    text_null_values: Optional[Iterable[str]] = None,
    delimiter: str = ",",
) -> list[Record]:
    """
    Read a CSV file or text stream into records.

    Columns listed in ``types`` are coerced ("int", "decimal", "date") and
    ``null_values`` tokens in them become None. Everything else stays text,
    where only ``text_null_values`` (blank cells by default) become None, so a
    store code "NA" survives.
    """
    settings = get_settings()
    types = dict(types or {})
    nulls = {
        "typed": list(settings.null_values if null_values is None else null_values),
        "text": list(settings.text_null_values if text_null_values is None else text_null_values),
    }

    if isinstance(source, (str, Path)):
        with open(source, "r", encoding="utf-8-sig", newline="") as handle:
            return _read_rows(handle, types, nulls, delimiter)
    return _read_rows(source, types, nulls, delimiter)


def _read_rows(handle: IO[str], types: dict, nulls: dict[str, list[str]], delimiter: str) -> list[Record]:
    reader = csv.DictReader(handle, delimiter=delimiter)
    unknown = set(types) - set(reader.fieldnames or [])
    if unknown:
        logger.warning(f"Typed columns not found in input: {', '.join(sorted(unknown))}")

    records: list[Record] = []
    for row in reader:
        record: Record = {}
        for column, value in row.items():
            if column is None:
                continue
            column_type = types.get(column, "text")
            tokens = nulls["text"] if column_type == "text" else nulls["typed"]
            record[column] = coerce_value(value, column_type, tokens)
        records.append(record)
    return records


# ============================================
# Output
# ============================================

def reconciled_rows(
    result: ReconciliationResult,
    *,
    left_label: Optional[str] = None,
    right_label: Optional[str] = None,
) -> list[dict[str, Any]]:
    """Flatten reconciled records into one dict per key."""
    settings = get_settings()
    left_label = left_label or settings.left_label
    right_label = right_label or settings.right_label

    rows: list[dict[str, Any]] = []
    for record in result.records:
        row: dict[str, Any] = dict(zip(result.key_spec.columns, record.key))
        row.update(record.attributes)
        for pair in result.field_pairs:
            label = pair.label
            row[f"{left_label}_{label}"] = record.left_fields.get(pair.left) if record.has_left else None
            row[f"{right_label}_{label}"] = record.right_fields.get(pair.right) if record.has_right else None
            row[f"{label}_Diff"] = record.differences.get(label)
        row[STATUS_COLUMN] = record.status.value if record.status else None
        rows.append(row)
    return rows


def aggregation_rows(
    results: Sequence[AggregationResult],
    *,
    left_label: Optional[str] = None,
    right_label: Optional[str] = None,
) -> list[dict[str, Any]]:
    """Flatten aggregation results; the grand-total row has Level 'Total'."""
    settings = get_settings()
    left_label = left_label or settings.left_label
    right_label = right_label or settings.right_label

    group_by: list[str] = next((r.group_by for r in results if r.group_by), [])

    rows: list[dict[str, Any]] = []
    for result in results:
        row: dict[str, Any] = {"Level": "Total" if result.is_grand_total else "Group"}
        values = dict(zip(result.group_by, result.group))
        for column in group_by:
            row[column] = values.get(column)
        row["Records"] = result.record_count
        for status in MatchStatus:
            row[status.value] = result.status_counts.get(status, 0)
        for label, totals in result.fields.items():
            row[f"{left_label}_{label}"] = totals.left_total
            row[f"{right_label}_{label}"] = totals.right_total
            row[f"{label}_Diff"] = totals.difference
            row[f"{label}_Compared"] = totals.compared
            row[f"{label}_{left_label}_Only"] = totals.left_unmatched
            row[f"{label}_{right_label}_Only"] = totals.right_unmatched
        rows.append(row)
    return rows


def write_rows(rows: Sequence[Mapping[str, Any]], target: Source, *, delimiter: str = ",") -> int:
    """Write rows as CSV; None is written as an empty cell. Returns rows written."""
    columns: list[str] = []
    for row in rows:
        for column in row:
            if column not in columns:
                columns.append(column)

    if isinstance(target, (str, Path)):
        with open(target, "w", encoding="utf-8", newline="") as handle:
            return _write(handle, columns, rows, delimiter)
    return _write(target, columns, rows, delimiter)


def _write(handle: IO[str], columns: list[str], rows: Sequence[Mapping[str, Any]], delimiter: str) -> int:
    writer = csv.DictWriter(handle, fieldnames=columns, delimiter=delimiter, extrasaction="ignore")
    writer.writeheader()
    for row in rows:
        writer.writerow({column: _cell(row.get(column)) for column in columns})
    return len(rows)


def _cell(value: Any) -> Any:
    if value is None:
        return ""
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value
