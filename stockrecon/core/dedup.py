# stockrecon/core/dedup.py

"""
Deduplication of one record set by business key.

Upstream extracts regularly contain the same key more than once. Matching such
a set directly multiplies rows, so every side goes through here first and the
reconciler only accepts the DeduplicatedRecords produced by this module.

Tie-break policy:
- keep="first": the first record seen in input order survives (default)
- keep="last":  the last record seen in input order survives
- priority:     a callable scoring each record; the highest score survives and
                the first-seen record wins ties

Duplicates are discarded, never summed. The number of discarded records per key
is kept and reported as a DuplicateKeyWarning.
"""

from typing import Any, Callable, Iterable, Iterator, Literal, Optional, Union
import logging

from stockrecon.core.keys import normalize_key
from stockrecon.models import DuplicateKeyWarning, Key, KeySpec, Record, Side

logger = logging.getLogger(__name__)

KeepPolicy = Literal["first", "last"]
Priority = Callable[[Record], Any]


class DeduplicatedRecords:
    """Exactly one record per key, plus what was thrown away to get there."""

    def __init__(
        self,
        key_columns: list[str],
        records: dict[Key, Record],
        discarded: Optional[dict[Key, int]] = None,
        side: Side = "left",
    ):
        self.key_columns = list(key_columns)
        self.records = records
        self.discarded: dict[Key, int] = dict(discarded or {})
        self.side = side

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records.values())

    def __contains__(self, key: Key) -> bool:
        return key in self.records

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DeduplicatedRecords):
            return NotImplemented
        return self.key_columns == other.key_columns and self.records == other.records

    def __repr__(self) -> str:
        return (
            f"DeduplicatedRecords(side={self.side!r}, keys={len(self.records)}, "
            f"discarded={self.total_discarded})"
        )

    def keys(self) -> list[Key]:
        return list(self.records)

    @property
    def total_discarded(self) -> int:
        return sum(self.discarded.values())

    @property
    def fields(self) -> set[str]:
        """Union of field names seen on this side."""
        names: set[str] = set()
        for record in self.records.values():
            names.update(record)
        return names

    @property
    def warnings(self) -> list[DuplicateKeyWarning]:
        return [
            DuplicateKeyWarning(
                message=f"{count} duplicate {self.side} record(s) discarded for key {key!r}",
                key=key,
                side=self.side,
                count=count,
            )
            for key, count in self.discarded.items()
        ]


def deduplicate(
    records: Union[Iterable[Record], DeduplicatedRecords],
    key_spec: KeySpec,
    *,
    side: Side = "left",
    keep: KeepPolicy = "first",
    priority: Optional[Priority] = None,
) -> DeduplicatedRecords:
    """
    Collapse a record set to one record per key.

    Raises MissingKeyFieldError if a record lacks a key column.
    """
    columns = key_spec.columns_for(side)

    # Already unique for this key; running it again would change nothing.
    if isinstance(records, DeduplicatedRecords) and records.key_columns == columns:
        return records

    kept: dict[Key, Record] = {}
    scores: dict[Key, Any] = {}
    discarded: dict[Key, int] = {}

    for record in records:
        key = normalize_key(
            record,
            columns,
            trim=key_spec.trim,
            case_insensitive=key_spec.case_insensitive,
        )

        if key not in kept:
            kept[key] = record
            if priority is not None:
                scores[key] = priority(record)
            continue

        discarded[key] = discarded.get(key, 0) + 1

        if priority is not None:
            score = priority(record)
            if score > scores[key]:
                kept[key] = record
                scores[key] = score
        elif keep == "last":
            kept[key] = record

    if discarded:
        logger.warning(
            f"Discarded {sum(discarded.values())} duplicate {side} record(s) "
            f"across {len(discarded)} key(s)"
        )

    return DeduplicatedRecords(columns, kept, discarded, side=side)
