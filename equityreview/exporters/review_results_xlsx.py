from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from openpyxl.utils.exceptions import IllegalCharacterError

from equityreview.core import xlsxio
from equityreview.core.errors import WriteError
from equityreview.core.schema import AnalysisResult, Recommendation

SHEET_TITLE = "Analysis Results"

COLUMNS: list[tuple[str, int]] = [
    ("ReviewBatch", 25),
    ("EmployeeId", 15),
    ("AI_Output", 80),
    ("AI_Recommendation", 20),
    ("ReviewStatus", 15),
    ("ReviewerNotes", 30),
    ("FlagsTriggered", 40),
]

RECOMMENDATION_COLUMN = 4
RECOMMENDATION_FILLS = {
    Recommendation.RED: "FFFF6B6B",
    Recommendation.GREEN: "FF51CF66",
}


@dataclass
class ResultArtifact:
    name: str
    path: Path


def artifact_name(job_id: str) -> str:
    return f"analysis-results-{job_id}.xlsx"


def summarise(result: AnalysisResult) -> str:
    return (
        f"Bias Assessment: {result.bias_assessment}"
        f" | Values Alignment: {result.values_alignment.value}"
        f" | Rating Consistency: {result.rating_consistency.value}"
        f" ({result.rating_consistency_rationale})"
    )


def _result_row(review_batch: str, result: AnalysisResult) -> list[str | None]:
    # reviewer columns stay empty for the human reviewer to fill in
    flags = ", ".join(flag.value for flag in result.flags_triggered)
    return [
        review_batch,
        result.employee_id,
        summarise(result),
        result.ai_recommendation.value,
        None,
        None,
        flags or None,
    ]


class ReviewResultsWriter:
    """Serialise analysis results into the downloadable review workbook."""

    def __init__(self, output_dir: Path) -> None:
        self._output_dir = output_dir

    def artifact_path(self, name: str) -> Path:
        return self._output_dir / Path(name).name

    def write(self, review_batch: str, results: Iterable[AnalysisResult], job_id: str) -> ResultArtifact:
        results = list(results)
        name = artifact_name(job_id)
        path = self.artifact_path(name)
        try:
            sheet = xlsxio.build_table(
                SHEET_TITLE,
                COLUMNS,
                (_result_row(review_batch, result) for result in results),
            )
            for row_index, result in enumerate(results, start=2):
                cell = sheet.cell(row=row_index, column=RECOMMENDATION_COLUMN)
                cell.fill = xlsxio.solid_fill(RECOMMENDATION_FILLS[result.ai_recommendation])
            sheet.auto_filter.ref = f"A1:G{len(results) + 1}"
            xlsxio.save_sheet(sheet, path)
        except (OSError, ValueError, KeyError, IllegalCharacterError) as exc:
            raise WriteError(f"Failed to generate results file: {exc}") from exc
        return ResultArtifact(name=name, path=path)
