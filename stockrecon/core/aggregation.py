# stockrecon/core/aggregation.py

"""
Roll reconciled records up to grouping levels.

The group difference is a fold over per-record differences that exist. It is
never sum(left) - sum(right): a left-only 100 and a right-only 100 in the same
group would cancel to 0 and hide two gaps. One-sided values are tallied
separately in left_unmatched / right_unmatched instead.
"""

from typing import Any, Optional, Sequence, Union

from stockrecon.core.comparison import add_numbers, check_labels, is_number
from stockrecon.core.keys import key_sort_token
from stockrecon.errors import MissingKeyFieldError
from stockrecon.models import (
    AggregationResult,
    FieldPair,
    FieldTotals,
    ReconciledRecord,
)


def aggregate(
    records: Union["ReconciliationResult", Sequence[ReconciledRecord]],
    group_by: Sequence[str],
    field_pairs: Sequence[FieldPair],
    *,
    key_columns: Optional[Sequence[str]] = None,
    grand_total: bool = False,
) -> list[AggregationResult]:
    """
    Aggregate records per distinct value of ``group_by``.

    ``group_by`` names key columns or carried attributes. An empty ``group_by``
    yields a single grand-total row. With ``grand_total`` a grand-total row is
    prepended to the grouped rows.
    """
    if key_columns is None:
        key_spec = getattr(records, "key_spec", None)
        key_columns = key_spec.columns if key_spec is not None else []
    key_columns = list(key_columns)
    # A ReconciliationResult knows its carried attributes; a bare list only
    # shows them through its records.
    carried = [pair.label for pair in records.carry] if hasattr(records, "carry") else None
    rows = list(getattr(records, "records", records))
    check_labels(field_pairs)

    extractors = [_group_extractor(name, key_columns, carried, rows) for name in group_by]

    groups: dict[tuple, AggregationResult] = {}
    total = _new_result((), [], field_pairs)

    for record in rows:
        group = tuple(extract(record) for extract in extractors)
        result = groups.get(group)
        if result is None:
            result = groups[group] = _new_result(group, list(group_by), field_pairs)
        _accumulate(result, record, field_pairs)
        if grand_total:
            _accumulate(total, record, field_pairs)

    if not group_by:
        # Everything landed in the () group already.
        return [groups.get((), total)]

    results = [groups[group] for group in sorted(groups, key=key_sort_token)]
    if grand_total:
        results.insert(0, total)
    return results


def _group_extractor(
    name: str,
    key_columns: list[str],
    carried: Optional[list[str]],
    rows: Sequence[ReconciledRecord],
):
    if name in key_columns:
        position = key_columns.index(name)
        return lambda record: record.key[position]

    if carried is not None:
        known = name in carried
    else:
        # Nothing to check an empty record list against.
        known = not rows or any(name in record.attributes for record in rows)
    if known:
        return lambda record: record.attributes.get(name)

    raise MissingKeyFieldError(name, key_columns + (carried or []))


def _new_result(group: tuple, group_by: list[str], field_pairs: Sequence[FieldPair]) -> AggregationResult:
    return AggregationResult(
        group=group,
        group_by=group_by,
        fields={pair.label: FieldTotals() for pair in field_pairs},
    )


def _accumulate(result: AggregationResult, record: ReconciledRecord, field_pairs: Sequence[FieldPair]) -> None:
    result.record_count += 1
    if record.status is not None:
        result.status_counts[record.status] = result.status_counts.get(record.status, 0) + 1

    for pair in field_pairs:
        totals = result.fields[pair.label]
        lhs = _numeric(record.left_fields, pair.left)
        rhs = _numeric(record.right_fields, pair.right)

        if lhs is not None:
            totals.left_total = add_numbers(totals.left_total, lhs)
        if rhs is not None:
            totals.right_total = add_numbers(totals.right_total, rhs)

        delta = record.differences.get(pair.label)
        if delta is not None:
            totals.difference = delta if totals.difference is None else add_numbers(totals.difference, delta)
            totals.compared += 1
            continue

        # A value whose counterpart is missing is a one-sided gap.
        left_present = _present(record.left_fields, pair.left)
        right_present = _present(record.right_fields, pair.right)
        if lhs is not None and not right_present:
            totals.left_unmatched = add_numbers(totals.left_unmatched, lhs)
        elif rhs is not None and not left_present:
            totals.right_unmatched = add_numbers(totals.right_unmatched, rhs)


def _numeric(fields: Optional[dict], name: str) -> Any:
    if fields is None:
        return None
    value = fields.get(name)
    return value if is_number(value) else None


def _present(fields: Optional[dict], name: str) -> bool:
    return fields is not None and fields.get(name) is not None
