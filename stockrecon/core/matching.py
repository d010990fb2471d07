# stockrecon/core/matching.py

"""
Full outer matching of two deduplicated record sets.

Produces exactly one ReconciledRecord per distinct key in
keys(left) ∪ keys(right). Both inputs must come out of the deduplicator:
matching raw sets with repeated keys is how row counts explode.
"""

from typing import Sequence
import logging

from stockrecon.core.dedup import DeduplicatedRecords
from stockrecon.core.keys import coalesce_key
from stockrecon.models import FieldPair, Record, ReconciledRecord

logger = logging.getLogger(__name__)


def pair_records(
    left: DeduplicatedRecords,
    right: DeduplicatedRecords,
    *,
    carry: Sequence[FieldPair] = (),
) -> list[ReconciledRecord]:
    """
    Pair left and right records by key.

    1. Index right records by key
    2. Walk left records in order, consuming matching right entries
    3. Emit the right entries nobody consumed as right-only records

    Differences and status are left empty; the comparator and classifier
    fill them in.
    """
    for name, side in (("left", left), ("right", right)):
        if not isinstance(side, DeduplicatedRecords):
            raise TypeError(
                f"{name} must be DeduplicatedRecords (run deduplicate() first), "
                f"got {type(side).__name__}"
            )

    if len(left.key_columns) != len(right.key_columns):
        raise ValueError(
            f"Key arity differs: left {left.key_columns} vs right {right.key_columns}"
        )

    # ============================================
    # Index right side
    # ============================================
    remaining: dict = dict(right.records)

    paired: list[ReconciledRecord] = []

    # ============================================
    # Left side, matched or left-only
    # ============================================
    for key, left_record in left.records.items():
        right_record = remaining.pop(key, None)
        right_key = key if right_record is not None else None
        paired.append(_build_record(key, right_key, left_record, right_record, carry))

    # ============================================
    # Right-only leftovers
    # ============================================
    for key, right_record in remaining.items():
        paired.append(_build_record(None, key, None, right_record, carry))

    logger.debug(
        f"Paired {len(left)} left and {len(right)} right records into {len(paired)} keys "
        f"({len(remaining)} right-only)"
    )
    return paired


def _build_record(
    left_key,
    right_key,
    left_record: Record | None,
    right_record: Record | None,
    carry: Sequence[FieldPair],
) -> ReconciledRecord:
    """Create a reconciled record with a coalesced key and carried attributes."""
    attributes: Record = {}
    for pair in carry:
        value = left_record.get(pair.left) if left_record is not None else None
        if value is None and right_record is not None:
            value = right_record.get(pair.right)
        attributes[pair.label] = value

    return ReconciledRecord(
        key=coalesce_key(left_key, right_key),
        left_fields=left_record,
        right_fields=right_record,
        attributes=attributes,
    )
