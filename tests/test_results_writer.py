from __future__ import annotations

import sys
from pathlib import Path

import pytest
from openpyxl import load_workbook

sys.path.append(str(Path(__file__).resolve().parents[1]))

from equityreview.core import rules_v1
from equityreview.core.errors import WriteError
from equityreview.core.schema import EmployeeRecord
from equityreview.exporters.review_results_xlsx import ReviewResultsWriter, artifact_name, summarise


def _results():
    green = rules_v1.evaluate(
        EmployeeRecord(
            employee_id="E001",
            overall_rating_employee="Meets Expectations",
            overall_rating_manager="Meets Expectations",
            manager_comments="Delivered the roadmap on time and mentored two new hires.",
        )
    )
    red = rules_v1.evaluate(
        EmployeeRecord(
            employee_id="E002",
            overall_rating_employee="Exceeds Expectations",
            overall_rating_manager="Does Not Meet Expectations",
            manager_comments="Difficult.",
        )
    )
    return [green, red]


def test_write_produces_styled_workbook(tmp_path):
    writer = ReviewResultsWriter(tmp_path / "results")

    artifact = writer.write("FY25 Mid-Year", _results(), "job123")

    assert artifact.name == "analysis-results-job123.xlsx"
    assert artifact.path == tmp_path / "results" / artifact.name
    sheet = load_workbook(artifact.path).active
    rows = list(sheet.iter_rows(values_only=True))
    assert rows[0] == (
        "ReviewBatch",
        "EmployeeId",
        "AI_Output",
        "AI_Recommendation",
        "ReviewStatus",
        "ReviewerNotes",
        "FlagsTriggered",
    )
    assert rows[1][:4] == ("FY25 Mid-Year", "E001", rows[1][2], "GREEN")
    assert rows[1][4] is None and rows[1][5] is None and rows[1][6] is None
    assert rows[2][3] == "RED"
    assert rows[2][6] == (
        "RatingMismatch_Overall_2+Levels, NarrativeInsufficient, LoadedLanguage_NoEvidence"
    )
    assert sheet.auto_filter.ref == "A1:G3"
    assert sheet.cell(row=2, column=4).fill.start_color.rgb == "FF51CF66"
    assert sheet.cell(row=3, column=4).fill.start_color.rgb == "FFFF6B6B"
    assert sheet.cell(row=1, column=1).font.bold
    assert sheet.column_dimensions["C"].width == 80


def test_summary_text_layout():
    text = summarise(_results()[1])

    assert text.startswith("Bias Assessment: Potential bias indicators present")
    assert " | Values Alignment: Aligned | " in text
    assert text.endswith(
        "Rating Consistency: Inconsistent (Significant variance detected between employee and manager ratings.)"
    )


def test_write_with_no_results_keeps_header(tmp_path):
    artifact = ReviewResultsWriter(tmp_path).write("Empty", [], "job0")

    sheet = load_workbook(artifact.path).active
    assert sheet.max_row == 1
    assert sheet.auto_filter.ref == "A1:G1"


def test_write_failure_raises_write_error(tmp_path):
    blocker = tmp_path / "results"
    blocker.write_text("not a directory")
    writer = ReviewResultsWriter(blocker)

    with pytest.raises(WriteError, match="Failed to generate results file"):
        writer.write("Batch", _results(), "job1")


def test_artifact_path_strips_directories(tmp_path):
    writer = ReviewResultsWriter(tmp_path)

    assert writer.artifact_path("../../etc/" + artifact_name("x")) == tmp_path / "analysis-results-x.xlsx"


def test_control_characters_raise_write_error(tmp_path):
    writer = ReviewResultsWriter(tmp_path)

    with pytest.raises(WriteError, match="Failed to generate results file"):
        writer.write("FY25\x07", _results(), "job2")
