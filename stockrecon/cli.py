# stockrecon/cli.py

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from stockrecon.config import get_settings
from stockrecon.core import aggregate, reconcile
from stockrecon.errors import ReconciliationError
from stockrecon.models import FieldPair, KeySpec, MatchStatus
from stockrecon.tabular import aggregation_rows, read_records, reconciled_rows, write_rows

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="stockrecon", description="Reconcile two CSV extracts by business key")
    parser.add_argument("--left", required=True, help="Path to the left-side CSV extract")
    parser.add_argument("--right", required=True, help="Path to the right-side CSV extract")
    parser.add_argument("--key", required=True, help="Comma separated key columns, e.g. barcode,STOREID")
    parser.add_argument(
        "--right-key",
        default=None,
        help="Comma separated key columns on the right side when named differently",
    )
    parser.add_argument(
        "--field",
        action="append",
        default=[],
        help="Numeric field to compare, NAME or LEFT:RIGHT (repeatable)",
    )
    parser.add_argument(
        "--carry",
        action="append",
        default=[],
        help="Descriptive field copied to the output, NAME or LEFT:RIGHT (repeatable)",
    )
    parser.add_argument(
        "--type",
        action="append",
        default=[],
        help="Column type COLUMN=int|decimal|date (repeatable; compared fields default to decimal)",
    )
    parser.add_argument("--keep", choices=["first", "last"], default=None, help="Duplicate tie-break policy")
    parser.add_argument("--trim-keys", action="store_true", default=False, help="Strip whitespace from key values")
    parser.add_argument(
        "--uncomparable-as-match",
        action="store_true",
        default=None,
        help="Classify records with no comparable field as Match instead of Indeterminate",
    )
    parser.add_argument("--output", default=None, help="Optional path to write reconciled rows as CSV")
    parser.add_argument("--group-by", default=None, help="Comma separated columns to aggregate by")
    parser.add_argument("--grand-total", action="store_true", default=False, help="Add a grand-total row")
    parser.add_argument("--aggregate-output", default=None, help="Optional path to write aggregation rows as CSV")
    parser.add_argument("--summary-json", default=None, help="Optional path to write the summary as JSON")
    parser.add_argument(
        "--fail-on-diagnostics",
        action="store_true",
        default=False,
        help="Exit with code 2 if the run produced diagnostics or any non-Match status",
    )
    return parser.parse_args(argv)


def _split(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [entry.strip() for entry in value.split(",") if entry.strip()]


def _column_types(args: argparse.Namespace, pairs: List[FieldPair]) -> tuple[Dict[str, str], Dict[str, str]]:
    left_types: Dict[str, str] = {}
    right_types: Dict[str, str] = {}
    for pair in pairs:
        left_types[pair.left] = "decimal"
        right_types[pair.right] = "decimal"
    for entry in args.type:
        column, _, kind = entry.partition("=")
        kind = kind.strip().lower()
        if kind not in {"text", "int", "decimal", "date"}:
            raise SystemExit(f"Invalid --type {entry!r}: expected COLUMN=text|int|decimal|date")
        left_types[column.strip()] = kind
        right_types[column.strip()] = kind
    return left_types, right_types


def run_cli(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        pairs = [FieldPair.from_spec(entry) for entry in args.field]
        carry = [FieldPair.from_spec(entry) for entry in args.carry]
        key_spec = KeySpec(
            columns=_split(args.key),
            right_columns=_split(args.right_key) or None,
            trim=args.trim_keys,
        )
    except ValueError as exc:
        logger.error(f"Invalid arguments: {exc}")
        raise SystemExit(1)
    left_types, right_types = _column_types(args, pairs)

    try:
        left = read_records(args.left, types=left_types)
        right = read_records(args.right, types=right_types)
        result = reconcile(
            left,
            right,
            key_spec,
            pairs,
            carry=carry,
            keep=args.keep,
            uncomparable_as_match=args.uncomparable_as_match,
        )
        aggregations = None
        group_by = _split(args.group_by)
        if group_by or args.grand_total:
            aggregations = aggregate(result, group_by, pairs, grand_total=args.grand_total)
    except OSError as exc:
        logger.error(f"Cannot read extract: {exc}")
        raise SystemExit(1)
    except ReconciliationError as exc:
        logger.error(f"Reconciliation failed: {exc}")
        raise SystemExit(1)

    if args.output:
        written = write_rows(reconciled_rows(result), args.output)
        logger.info(f"Wrote {written} reconciled rows to {args.output}")
    if aggregations is not None and args.aggregate_output:
        write_rows(aggregation_rows(aggregations), args.aggregate_output)

    payload: Dict[str, Any] = result.to_dict(include_records=False)
    payload["status"] = "completed"
    if aggregations is not None:
        payload["aggregations"] = [row.model_dump(mode="json") for row in aggregations]

    if args.summary_json:
        with open(args.summary_json, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2, sort_keys=True)
    else:
        print(json.dumps(payload, indent=2, sort_keys=True))

    if args.fail_on_diagnostics:
        statuses = {record.status for record in result.records}
        if result.has_diagnostics or statuses - {MatchStatus.MATCH}:
            raise SystemExit(2)


def main() -> None:
    run_cli(sys.argv[1:])


__all__ = ["parse_args", "run_cli", "main"]
