# tests/test_tabular.py

"""
Tests for CSV input/output and the command line entry point.
"""

import csv
import io
import json
import pytest
from datetime import date
from decimal import Decimal

from stockrecon.cli import run_cli
from stockrecon.core import aggregate, coerce_value, reconcile
from stockrecon.models import FieldPair, KeySpec
from stockrecon.tabular import aggregation_rows, read_records, reconciled_rows, write_rows


LEFT_CSV = """barcode,STOREID,QTY,COSTS,shopcode
100,S1,10,50.00,SH1
100,S1,10,50.00,SH1
200,S1,4,20.00,SH1
300,S2,,35.00,SH2
"""

RIGHT_CSV = """barcode,STOREID,QTY,COSTS,shopcode
100,S1,10,50.00,SH1
200,S1,6,20.00,SH1
300,S2,7,35.00,SH2
400,S2,1,5.00,SH9
"""

TYPES = {"QTY": "int", "COSTS": "decimal"}


# ============================================
# Value Coercion Tests
# ============================================

class TestCoerceValue:
    """Test typed coercion of raw cells."""

    def test_null_tokens(self):
        assert coerce_value("", "int") is None
        assert coerce_value("NULL", "decimal") is None
        assert coerce_value(" ", "text") is None

    def test_zero_stays_zero(self):
        assert coerce_value("0", "int") == 0
        assert coerce_value("0", "int") is not None

    def test_numbers(self):
        assert coerce_value("1,234.50", "decimal") == Decimal("1234.50")
        assert coerce_value("10.0", "int") == 10

    def test_dates(self):
        assert coerce_value("2025-01-15", "date") == date(2025, 1, 15)
        assert coerce_value("01/15/2025", "date") == date(2025, 1, 15)

    def test_unparsable_kept_as_text(self):
        """Bad numbers stay text so the comparator reports them."""
        assert coerce_value("ten", "int") == "ten"
        assert coerce_value("10.5", "int") == "10.5"

    @pytest.mark.parametrize("text", ["1.234,56", "1,5", "12,34.5"])
    def test_decimal_comma_kept_as_text(self, text):
        """Only comma thousands separators are understood."""
        assert coerce_value(text, "decimal") == text


# ============================================
# CSV Round Trip Tests
# ============================================

class TestCsv:
    """Test reading extracts and writing reconciled rows."""

    def test_read_records(self):
        records = read_records(io.StringIO(LEFT_CSV), types=TYPES)

        assert len(records) == 4
        assert records[0] == {
            "barcode": "100",
            "STOREID": "S1",
            "QTY": 10,
            "COSTS": Decimal("50.00"),
            "shopcode": "SH1",
        }
        assert records[3]["QTY"] is None

    def test_null_tokens_only_in_typed_columns(self):
        text = "region,QTY\nNA,NA\n,5\n"

        records = read_records(io.StringIO(text), types={"QTY": "int"})

        assert records[0] == {"region": "NA", "QTY": None}
        assert records[1] == {"region": None, "QTY": 5}

    def test_reconciled_rows_layout(self):
        left = read_records(io.StringIO(LEFT_CSV), types=TYPES)
        right = read_records(io.StringIO(RIGHT_CSV), types=TYPES)
        result = reconcile(
            left,
            right,
            KeySpec(columns=["barcode", "STOREID"]),
            [FieldPair(left="QTY", right="QTY"), FieldPair(left="COSTS", right="COSTS")],
            carry=[FieldPair(left="shopcode", right="shopcode")],
        )

        rows = reconciled_rows(result, left_label="Azure", right_label="BIPROD")

        assert list(rows[0]) == [
            "barcode",
            "STOREID",
            "shopcode",
            "Azure_QTY",
            "BIPROD_QTY",
            "QTY_Diff",
            "Azure_COSTS",
            "BIPROD_COSTS",
            "COSTS_Diff",
            "Match_Status",
        ]
        by_barcode = {row["barcode"]: row for row in rows}
        assert by_barcode["100"]["Match_Status"] == "Match"
        assert by_barcode["200"]["QTY_Diff"] == -2
        assert by_barcode["300"]["QTY_Diff"] is None
        assert by_barcode["300"]["COSTS_Diff"] == Decimal("0")
        assert by_barcode["300"]["Match_Status"] == "Match"
        assert by_barcode["400"]["Match_Status"] == "RightOnly"
        assert by_barcode["400"]["Azure_QTY"] is None

    def test_write_rows_blank_for_missing(self):
        buffer = io.StringIO()

        written = write_rows([{"a": 1, "b": None}, {"a": 0, "c": date(2025, 1, 2)}], buffer)

        assert written == 2
        lines = list(csv.reader(io.StringIO(buffer.getvalue())))
        assert lines == [["a", "b", "c"], ["1", "", ""], ["0", "", "2025-01-02"]]

    def test_aggregation_rows(self):
        left = read_records(io.StringIO(LEFT_CSV), types=TYPES)
        right = read_records(io.StringIO(RIGHT_CSV), types=TYPES)
        pairs = [FieldPair(left="QTY", right="QTY")]
        result = reconcile(left, right, KeySpec(columns=["barcode", "STOREID"]), pairs)

        rows = aggregation_rows(aggregate(result, ["STOREID"], pairs, grand_total=True))

        assert [row["Level"] for row in rows] == ["Total", "Group", "Group"]
        assert rows[0]["STOREID"] is None
        assert rows[1]["STOREID"] == "S1"
        assert rows[1]["Left_QTY"] == 14
        assert rows[1]["QTY_Diff"] == -2
        assert rows[2]["QTY_Right_Only"] == 8


# ============================================
# CLI Tests
# ============================================

class TestCli:
    """Test the command line entry point end to end."""

    @pytest.fixture
    def extracts(self, tmp_path):
        left = tmp_path / "left.csv"
        right = tmp_path / "right.csv"
        left.write_text(LEFT_CSV, encoding="utf-8")
        right.write_text(RIGHT_CSV, encoding="utf-8")
        return tmp_path, left, right

    def test_writes_output_and_summary(self, extracts):
        tmp_path, left, right = extracts
        output = tmp_path / "out.csv"
        summary = tmp_path / "summary.json"

        run_cli([
            "--left", str(left),
            "--right", str(right),
            "--key", "barcode,STOREID",
            "--field", "QTY",
            "--field", "COSTS",
            "--type", "QTY=int",
            "--carry", "shopcode",
            "--output", str(output),
            "--group-by", "STOREID",
            "--summary-json", str(summary),
        ])

        payload = json.loads(summary.read_text(encoding="utf-8"))
        assert payload["status"] == "completed"
        assert payload["summary"]["total_keys"] == 4
        assert payload["summary"]["left_duplicates_discarded"] == 1
        assert payload["diagnostics_by_kind"] == {"duplicate_key": 1}
        assert len(payload["aggregations"]) == 2

        with open(output, newline="", encoding="utf-8") as handle:
            rows = list(csv.DictReader(handle))
        assert len(rows) == 4
        assert rows[-1]["Match_Status"] == "RightOnly"

    def test_fail_on_diagnostics(self, extracts, capsys):
        _, left, right = extracts

        with pytest.raises(SystemExit) as exc_info:
            run_cli([
                "--left", str(left),
                "--right", str(right),
                "--key", "barcode,STOREID",
                "--field", "QTY",
                "--fail-on-diagnostics",
            ])

        assert exc_info.value.code == 2
        printed = json.loads(capsys.readouterr().out)
        assert printed["summary"]["mismatched"] == 1

    def test_missing_key_column_exits(self, extracts):
        _, left, right = extracts

        with pytest.raises(SystemExit) as exc_info:
            run_cli(["--left", str(left), "--right", str(right), "--key", "ean"])

        assert exc_info.value.code == 1

    @pytest.mark.parametrize(
        "extra",
        [
            ["--key", ","],
            ["--key", "barcode", "--field", ":QTY"],
            ["--key", "barcode", "--field", "QTY", "--field", "QTY"],
        ],
    )
    def test_bad_arguments_exit(self, extracts, extra):
        _, left, right = extracts

        with pytest.raises(SystemExit) as exc_info:
            run_cli(["--left", str(left), "--right", str(right), *extra])

        assert exc_info.value.code == 1

    def test_missing_extract_exits(self, extracts):
        tmp_path, left, _ = extracts

        with pytest.raises(SystemExit) as exc_info:
            run_cli(["--left", str(left), "--right", str(tmp_path / "absent.csv"), "--key", "barcode"])

        assert exc_info.value.code == 1
