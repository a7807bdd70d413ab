"""Parser for performance-review rating workbooks."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from equityreview.core import xlsxio
from equityreview.core.errors import ParseError
from equityreview.core.schema import EmployeeRecord
from equityreview.extractors.columns import (
    COLUMN_ALIASES,
    IDENTIFIER_FIELD,
    NOT_PRESENT,
    ColumnMap,
    resolve_columns,
)


@dataclass
class ReviewParseResult:
    records: list[EmployeeRecord]
    column_map: ColumnMap
    sheet: str


def _cell_text(row: list[Any], index: int) -> str | None:
    if index == NOT_PRESENT or index >= len(row):
        return None
    value = row[index]
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def extract_records(rows: list[list[Any]]) -> tuple[list[EmployeeRecord], ColumnMap]:
    column_map = resolve_columns(rows[0] if rows else [])
    id_index = column_map.index_of(IDENTIFIER_FIELD)

    records: list[EmployeeRecord] = []
    for row in rows[1:]:
        employee_id = _cell_text(row, id_index)
        if not employee_id:
            continue
        values = {
            field: _cell_text(row, column_map.index_of(field))
            for field in COLUMN_ALIASES
            if field != IDENTIFIER_FIELD
        }
        records.append(EmployeeRecord(employee_id=employee_id, **values))

    if not records:
        raise ParseError("no employee data found")
    return records, column_map


def parse(path: Path) -> ReviewParseResult:
    try:
        sheet = xlsxio.read_first_sheet(path)
    except Exception as exc:
        raise ParseError(f"failed to read spreadsheet: {exc}") from exc
    if sheet is None:
        raise ParseError("no worksheet found in the spreadsheet")

    records, column_map = extract_records(sheet.rows)
    return ReviewParseResult(records=records, column_map=column_map, sheet=sheet.sheet)
