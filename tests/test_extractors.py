from __future__ import annotations

import sys
from pathlib import Path

import pytest
from openpyxl import Workbook

sys.path.append(str(Path(__file__).resolve().parents[1]))

from equityreview.core.errors import ParseError
from equityreview.extractors import review_sheet
from equityreview.extractors.columns import NOT_PRESENT, resolve_columns

STANDARD_HEADER = [
    "EmployeeId",
    "Goal Employee Rating",
    "Goal Manager Rating",
    "Values Employee Rating",
    "Values Manager Rating",
    "Overall Rating - Employee",
    "Overall Rating - Manager",
    "Manager Comments",
]


def _write_workbook(path: Path, rows: list[list]) -> Path:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Reviews"
    for row in rows:
        sheet.append(row)
    workbook.save(path)
    return path


def test_resolve_columns_standard_header():
    column_map = resolve_columns(STANDARD_HEADER)

    assert column_map.index_of("employee_id") == 0
    assert column_map.index_of("goal_manager_rating") == 2
    assert column_map.index_of("overall_rating_manager") == 6
    assert column_map.index_of("manager_comments") == 7
    assert column_map.missing() == []


def test_resolve_columns_accepts_alternate_spellings():
    column_map = resolve_columns(["Emp_ID", "  Manager   Feedback ", "Employee Overall Rating"])

    assert column_map.index_of("employee_id") == 0
    assert column_map.index_of("manager_comments") == 1
    assert column_map.index_of("overall_rating_employee") == 2
    assert column_map.index_of("goal_employee_rating") == NOT_PRESENT
    assert "goal_employee_rating" in column_map.missing()


def test_resolve_columns_requires_identifier():
    with pytest.raises(ParseError, match="identifier column not found"):
        resolve_columns(["Name", "Manager Comments"])


def test_parse_standard_workbook(tmp_path):
    path = _write_workbook(
        tmp_path / "reviews.xlsx",
        [
            STANDARD_HEADER,
            [
                "E001",
                "Meets Expectations",
                "Exceeds Expectations",
                "Meets Expectations",
                "Meets Expectations",
                "Meets Expectations",
                "Exceeds Expectations",
                "  Shipped the billing migration two weeks early.  ",
            ],
            ["E002", None, None, None, None, None, None, None],
        ],
    )

    parsed = review_sheet.parse(path)

    assert parsed.sheet == "Reviews"
    assert [record.employee_id for record in parsed.records] == ["E001", "E002"]
    first = parsed.records[0]
    assert first.goal_manager_rating == "Exceeds Expectations"
    assert first.manager_comments == "Shipped the billing migration two weeks early."
    second = parsed.records[1]
    assert second.manager_comments is None
    assert second.overall_rating_manager is None


def test_parse_skips_rows_without_identifier(tmp_path):
    path = _write_workbook(
        tmp_path / "gaps.xlsx",
        [
            ["Employee ID", "Comments"],
            ["E001", "Consistently strong delivery."],
            [None, "Orphan comment with no employee."],
            ["   ", "Blank identifier."],
            ["E004", "Reliable and thorough."],
        ],
    )

    parsed = review_sheet.parse(path)

    assert [record.employee_id for record in parsed.records] == ["E001", "E004"]


def test_parse_numeric_identifiers_as_text(tmp_path):
    path = _write_workbook(
        tmp_path / "numeric.xlsx",
        [["EmployeeId", "Manager Comments"], [1001, "Solid quarter overall."], [1002.0, None]],
    )

    parsed = review_sheet.parse(path)

    assert [record.employee_id for record in parsed.records] == ["1001", "1002"]


def test_parse_reports_missing_identifier_column(tmp_path):
    path = _write_workbook(tmp_path / "no-id.xlsx", [["Name", "Comments"], ["Alex", "Fine."]])

    with pytest.raises(ParseError, match="identifier column not found"):
        review_sheet.parse(path)


def test_parse_reports_empty_sheet(tmp_path):
    path = _write_workbook(tmp_path / "header-only.xlsx", [STANDARD_HEADER])

    with pytest.raises(ParseError, match="no employee data found"):
        review_sheet.parse(path)


def test_parse_reports_unreadable_file(tmp_path):
    path = tmp_path / "broken.xlsx"
    path.write_bytes(b"this is not a zip archive")

    with pytest.raises(ParseError, match="failed to read spreadsheet"):
        review_sheet.parse(path)
