#!/usr/bin/env python
from __future__ import annotations

import argparse
import random
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill

HEADER = [
    ("EmployeeId", 15),
    ("Goal Employee Rating", 25),
    ("Goal Manager Rating", 25),
    ("Values Employee Rating", 25),
    ("Values Manager Rating", 25),
    ("Overall Rating - Employee", 25),
    ("Overall Rating - Manager", 25),
    ("Manager Comments", 80),
]

RATINGS = [
    "Does Not Meet Expectations",
    "Meets Expectations",
    "Exceeds Expectations",
]

COMMENTS = [
    "Consistently meets expectations and delivers quality work on time.",
    "Strong performer. Specifically, led the Q3 billing migration without a single outage.",
    "Communication needs work; two sprint deadlines slipped without notice.",
    "Good team player with solid technical skills who could be more proactive.",
    "Excellent work ethic and always willing to help colleagues.",
    "Output dropped this quarter. Recommend a performance improvement plan.",
    "Outstanding contributor, ready for promotion consideration.",
    "Covers the basics but rarely takes initiative. Consider additional training.",
    "Difficult to work with and has communication issues.",
    "Too aggressive in meetings, needs to learn to collaborate better.",
    "Not a culture fit for the team.",
    "Emotional responses during feedback sessions were noted.",
    "Mentioned ongoing medical issues affecting work.",
    "Reported harassment concerns from a previous department.",
    "Lacks executive presence in client-facing situations.",
    "Solid contributor who struggles with new tooling.",
    "Great.",
    "",
]


def _manager_rating(employee_index: int, rng: random.Random) -> str:
    roll = rng.random()
    variance = 2 if roll < 0.2 else 1 if roll < 0.4 else 0
    if rng.random() < 0.5:
        variance = -variance
    return RATINGS[max(0, min(2, employee_index + variance))]


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate a sample performance-review workbook")
    parser.add_argument("--output", required=True, help="Output file path (.xlsx)")
    parser.add_argument("--count", type=int, default=25, help="Number of employee rows")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for repeatable output")
    args = parser.parse_args()

    rng = random.Random(args.seed)
    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Performance Reviews"
    sheet.append([header for header, _ in HEADER])
    for index, (_, width) in enumerate(HEADER, start=1):
        sheet.column_dimensions[sheet.cell(row=1, column=index).column_letter].width = width
    for cell in sheet[1]:
        cell.font = Font(bold=True, color="FFFFFFFF")
        cell.fill = PatternFill(fill_type="solid", start_color="FF4472C4", end_color="FF4472C4")

    for number in range(1, args.count + 1):
        employee_index = rng.randrange(3)
        sheet.append([
            f"E{number:03d}",
            RATINGS[employee_index],
            rng.choice(RATINGS),
            rng.choice(RATINGS),
            rng.choice(RATINGS),
            RATINGS[employee_index],
            _manager_rating(employee_index, rng),
            COMMENTS[number % len(COMMENTS)] or None,
        ])

    workbook.save(output)
    print(f"Sample workbook written to {output} ({args.count} employees)")


if __name__ == "__main__":
    main()
