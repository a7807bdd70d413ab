"""Spreadsheet codec shared by the review extractor and the results writer."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Sequence

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.worksheet.worksheet import Worksheet

HEADER_FILL = "FF4472C4"
HEADER_FONT_COLOR = "FFFFFFFF"


@dataclass
class SheetRows:
    sheet: str
    rows: list[list[Any]]


def read_first_sheet(path: Path) -> SheetRows | None:
    """Return every row of the first worksheet, header included.

    Empty cells come back as ``None``. ``None`` is returned when the
    workbook has no worksheet at all.
    """

    with pd.ExcelFile(path, engine="openpyxl") as excel:
        if not excel.sheet_names:
            return None
        sheet_name = excel.sheet_names[0]
        frame = excel.parse(sheet_name=sheet_name, header=None, dtype=object)
    frame = frame.astype(object).where(pd.notna(frame), None)
    return SheetRows(sheet=str(sheet_name), rows=frame.values.tolist())


def solid_fill(argb: str) -> PatternFill:
    return PatternFill(fill_type="solid", start_color=argb, end_color=argb)


def build_table(
    title: str,
    columns: Sequence[tuple[str, int]],
    rows: Iterable[Sequence[Any]],
) -> Worksheet:
    """Lay out a styled header row plus data rows in a fresh workbook.

    ``columns`` pairs each header with its column width. Nothing is written
    to disk until :func:`save_sheet` is called.
    """

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = title
    sheet.append([header for header, _ in columns])
    for index, (_, width) in enumerate(columns, start=1):
        sheet.column_dimensions[sheet.cell(row=1, column=index).column_letter].width = width
    for cell in sheet[1]:
        cell.font = Font(bold=True, color=HEADER_FONT_COLOR)
        cell.fill = solid_fill(HEADER_FILL)
    for row in rows:
        sheet.append(list(row))
    return sheet


def save_sheet(sheet: Worksheet, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    sheet.parent.save(path)
    return path
