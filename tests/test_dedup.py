# tests/test_dedup.py

"""
Tests for key extraction and deduplication.
"""

import pytest

from stockrecon.core import coalesce_key, deduplicate, key_sort_token, normalize_key
from stockrecon.errors import KeyConflictError, MissingKeyFieldError
from stockrecon.models import KeySpec


KEY = KeySpec(columns=["barcode", "STOREID"])


def make_row(barcode, store, qty=None, **extra) -> dict:
    return {"barcode": barcode, "STOREID": store, "QTY": qty, **extra}


# ============================================
# Key Normalizer Tests
# ============================================

class TestNormalizeKey:
    """Test business key extraction."""

    def test_extracts_in_order(self):
        record = make_row("123", "S1", 5)

        assert normalize_key(record, ["STOREID", "barcode"]) == ("S1", "123")

    def test_missing_value_is_kept(self):
        """A None component is part of the key, not an error."""
        record = make_row("123", None)

        assert normalize_key(record, ["barcode", "STOREID"]) == ("123", None)

    def test_missing_column_raises(self):
        """A column the record does not have is a schema error."""
        with pytest.raises(MissingKeyFieldError) as exc_info:
            normalize_key({"barcode": "123"}, ["barcode", "STOREID"])

        assert exc_info.value.field == "STOREID"
        assert exc_info.value.available == ["barcode"]

    def test_trim_and_case(self):
        record = make_row("  AbC ", "s1")

        key = normalize_key(record, ["barcode", "STOREID"], trim=True, case_insensitive=True)

        assert key == ("abc", "s1")

    def test_coalesce_prefers_left(self):
        assert coalesce_key(("A", None), ("A", "S1")) == ("A", "S1")
        assert coalesce_key(None, ("B", "S2")) == ("B", "S2")
        assert coalesce_key(("C", "S3"), None) == ("C", "S3")

    def test_coalesce_conflict(self):
        with pytest.raises(KeyConflictError):
            coalesce_key(("A", "S1"), ("A", "S2"))

    def test_sort_token_handles_none_and_mixed_types(self):
        keys = [("b",), (None,), ("a",), (3,)]

        ordered = sorted(keys, key=key_sort_token)

        assert ordered[-1] == (None,)
        assert ordered.index(("a",)) < ordered.index(("b",))


# ============================================
# Deduplicator Tests
# ============================================

class TestDeduplicate:
    """Test deduplication and its tie-break policies."""

    def test_keeps_first_by_default(self):
        records = [make_row("1", "S1", 10), make_row("1", "S1", 99), make_row("2", "S1", 5)]

        result = deduplicate(records, KEY)

        assert len(result) == 2
        assert result.records[("1", "S1")]["QTY"] == 10
        assert result.discarded == {("1", "S1"): 1}
        assert result.total_discarded == 1

    def test_keep_last(self):
        records = [make_row("1", "S1", 10), make_row("1", "S1", 99)]

        result = deduplicate(records, KEY, keep="last")

        assert result.records[("1", "S1")]["QTY"] == 99

    def test_priority_wins_over_order(self):
        """The highest priority survives, first seen breaks ties."""
        records = [
            make_row("1", "S1", 10, loaded=1),
            make_row("1", "S1", 20, loaded=3),
            make_row("1", "S1", 30, loaded=3),
        ]

        result = deduplicate(records, KEY, priority=lambda r: r["loaded"])

        assert result.records[("1", "S1")]["QTY"] == 20
        assert result.discarded[("1", "S1")] == 2

    def test_never_sums_duplicates(self):
        """Duplicates are dropped, not added together."""
        records = [make_row("1", "S1", 10)] * 5

        result = deduplicate(records, KEY)

        assert result.records[("1", "S1")]["QTY"] == 10

    @pytest.mark.parametrize("copies", [1, 2, 7])
    def test_one_record_per_key(self, copies):
        records = [make_row("1", "S1", 10)] * copies

        result = deduplicate(records, KEY)

        assert len(result) == 1
        assert result.total_discarded == copies - 1

    def test_idempotent(self):
        records = [make_row("1", "S1", 1), make_row("1", "S1", 2), make_row("2", None, 3)]

        once = deduplicate(records, KEY)

        assert deduplicate(once, KEY) == once
        assert deduplicate(list(once), KEY) == once

    def test_warnings_report_counts(self):
        records = [make_row("1", "S1")] * 3 + [make_row("2", "S1")] * 2

        result = deduplicate(records, KEY, side="right")
        warnings = result.warnings

        assert {w.key: w.count for w in warnings} == {("1", "S1"): 2, ("2", "S1"): 1}
        assert all(w.kind == "duplicate_key" and w.side == "right" for w in warnings)

    def test_uses_right_columns_for_right_side(self):
        key_spec = KeySpec(columns=["barcode"], right_columns=["ean"])

        result = deduplicate([{"ean": "1"}, {"ean": "1"}], key_spec, side="right")

        assert result.keys() == [("1",)]
        assert result.key_columns == ["ean"]

    def test_trimmed_keys_collapse(self):
        key_spec = KeySpec(columns=["barcode"], trim=True)

        result = deduplicate([{"barcode": "1 "}, {"barcode": " 1"}], key_spec)

        assert len(result) == 1

    def test_key_spec_validation(self):
        with pytest.raises(ValueError):
            KeySpec(columns=["a", "a"])
        with pytest.raises(ValueError):
            KeySpec(columns=["a", "b"], right_columns=["x"])
        with pytest.raises(ValueError):
            KeySpec(columns=[])
