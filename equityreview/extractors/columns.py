"""Header resolution for performance-review workbooks.

Review exports come from different HR systems, so the header row is matched
against a table of accepted spellings per canonical field rather than exact
names.  A header matches when its normalised form equals an alias or contains
one; headers are scanned left to right and the first match wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from equityreview.core.errors import ParseError

NOT_PRESENT = -1

COLUMN_ALIASES: dict[str, list[str]] = {
    "employee_id": ["employeeid", "employee_id", "emp_id", "empid", "id", "employee id", "employee"],
    "goal_employee_rating": [
        "goal employee rating",
        "goals employee rating",
        "goal_employee_rating",
        "goals_employee_rating",
        "employee goal rating",
    ],
    "goal_manager_rating": [
        "goal manager rating",
        "goals manager rating",
        "goal_manager_rating",
        "goals_manager_rating",
        "manager goal rating",
    ],
    "values_employee_rating": [
        "values employee rating",
        "value employee rating",
        "values_employee_rating",
        "employee values rating",
    ],
    "values_manager_rating": [
        "values manager rating",
        "value manager rating",
        "values_manager_rating",
        "manager values rating",
    ],
    "overall_rating_employee": [
        "overall rating - employee",
        "overall rating employee",
        "overall_rating_employee",
        "employee overall rating",
        "overall employee rating",
    ],
    "overall_rating_manager": [
        "overall rating - manager",
        "overall rating manager",
        "overall_rating_manager",
        "manager overall rating",
        "overall manager rating",
    ],
    "manager_comments": [
        "manager comments",
        "manager_comments",
        "comments",
        "manager feedback",
        "feedback",
        "manager notes",
        "notes",
    ],
}

IDENTIFIER_FIELD = "employee_id"


def normalise_header(text: Any) -> str:
    if text is None:
        return ""
    return " ".join(str(text).lower().split())


def _find_column(headers: list[str], aliases: list[str]) -> int:
    for index, header in enumerate(headers):
        if not header:
            continue
        if any(header == alias or alias in header for alias in aliases):
            return index
    return NOT_PRESENT


@dataclass(frozen=True)
class ColumnMap:
    indices: dict[str, int]

    def index_of(self, field: str) -> int:
        return self.indices.get(field, NOT_PRESENT)

    def missing(self) -> list[str]:
        return [field for field, index in self.indices.items() if index == NOT_PRESENT]


def resolve_columns(headers: Sequence[Any]) -> ColumnMap:
    """Map raw header cells to canonical field indices."""

    normalised = [normalise_header(header) for header in headers]
    indices = {
        field: _find_column(normalised, [normalise_header(alias) for alias in aliases])
        for field, aliases in COLUMN_ALIASES.items()
    }
    if indices[IDENTIFIER_FIELD] == NOT_PRESENT:
        raise ParseError(
            "identifier column not found. Please ensure the workbook has a column named "
            "'EmployeeId', 'Employee ID', or similar."
        )
    return ColumnMap(indices=indices)
