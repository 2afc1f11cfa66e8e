import csv
import io
import json
import os
from datetime import date, datetime

from expense_tracker.domain import Category, Expense
from expense_tracker.export import (
    CSV_HEADER,
    ExportFormat,
    export_expenses,
    format_expenses,
    medium_date,
    write_atomically,
)


def make_exp(id, name, value=4.5, category=Category.FOOD):
    return Expense(id=id, name=name, date=datetime(2025, 1, 5, 8, 15), value=value, category=category)


def test_medium_date():
    assert medium_date(datetime(2025, 1, 5)) == "Jan 5, 2025"
    assert medium_date(datetime(2024, 12, 25, 23, 0)) == "Dec 25, 2024"


def test_csv_export():
    out = format_expenses([make_exp("a1", "Tea"), make_exp("a2", 'Coffee, "Large"', 3.0)], ExportFormat.CSV)
    assert out.is_right()
    lines = out.get_or_else("").splitlines()
    assert lines[0] == CSV_HEADER
    assert lines[1] == "a1,Tea,\"Jan 5, 2025\",4.5,Food"
    assert lines[2] == 'a2,"Coffee, ""Large""","Jan 5, 2025",3.0,Food'


def test_csv_export_quotes_awkward_names():
    names = ['Coffee, "Large"', "two\nlines", 'say "hi"', "carriage\rreturn"]
    out = format_expenses([make_exp(f"a{i}", n) for i, n in enumerate(names)], ExportFormat.CSV)
    assert out.is_right()
    text = out.get_or_else("")
    assert '"Coffee, ""Large"""' in text

    rows = list(csv.reader(io.StringIO(text, newline="")))
    assert rows[0] == CSV_HEADER.split(",")
    assert len(rows) == len(names) + 1
    assert [r[1] for r in rows[1:]] == names


def test_csv_export_empty_has_header_only():
    out = format_expenses([], ExportFormat.CSV)
    assert out.get_or_else(None) == CSV_HEADER + "\r\n"


def test_json_export_round_trips():
    out = format_expenses([make_exp("a1", "Café", 12.0, Category.OTHER)], ExportFormat.JSON)
    assert out.is_right()
    text = out.get_or_else("")
    assert "Café" in text
    data = json.loads(text)
    assert data == [{
        "id": "a1",
        "name": "Café",
        "date": "Jan 5, 2025",
        "amount": 12.0,
        "category": "Other",
    }]
    assert list(data[0].keys()) == ["id", "name", "date", "amount", "category"]


def test_unencodable_text_is_reported_as_failure():
    bad = make_exp("a1", "broken \ud800 name")
    for kind in ExportFormat:
        out = format_expenses([bad], kind)
        assert out.is_left()
        assert out.get_error()["error"] == "serialization_failed"


def test_export_writes_named_file(tmp_path):
    out = export_expenses([make_exp("a1", "Tea")], ExportFormat.CSV, tmp_path, today=date(2025, 3, 9))
    assert out.is_right()
    path = out.get_or_else(None)
    assert path.name == "ExpenseTracker_2025-03-09.csv"
    assert path.read_text(encoding="utf-8").startswith(CSV_HEADER)


def test_failed_export_leaves_no_file(tmp_path):
    bad = make_exp("a1", "broken \ud800 name")
    out = export_expenses([bad], ExportFormat.JSON, tmp_path, today=date(2025, 3, 9))
    assert out.is_left()
    assert os.listdir(tmp_path) == []


def test_non_finite_amount_is_not_written_as_json():
    out = format_expenses([make_exp("a1", "Tea", float("nan"))], ExportFormat.JSON)
    assert out.is_left()
    assert out.get_error()["error"] == "serialization_failed"


def test_failed_replace_keeps_old_file(tmp_path, monkeypatch):
    target = tmp_path / "out.csv"
    target.write_text("old", encoding="utf-8")

    def boom(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", boom)
    out = write_atomically("new", target)

    assert out.is_left()
    assert out.get_error()["error"] == "write_failed"
    assert target.read_text(encoding="utf-8") == "old"
    assert os.listdir(tmp_path) == ["out.csv"]
