"""Ordinal normalisation of free-text performance rating labels."""

from __future__ import annotations

from typing import Callable

RATING_LABELS: dict[str, int] = {
    "does not meet expectations": 1,
    "does not meet": 1,
    "below expectations": 1,
    "below": 1,
    "needs improvement": 1,
    "meets expectations": 2,
    "meets": 2,
    "meeting expectations": 2,
    "meeting": 2,
    "satisfactory": 2,
    "exceeds expectations": 3,
    "exceeds": 3,
    "exceeding expectations": 3,
    "exceeding": 3,
    "outstanding": 3,
    "exceptional": 3,
}


def _canonical_label(label: str) -> str:
    return " ".join(label.lower().split())


class RatingNormalizer:
    """Map rating labels to 1..3, reporting labels that are present but unknown.

    ``on_unknown`` is called once per non-empty label that is not in
    :data:`RATING_LABELS`; absent labels return ``None`` without reporting.
    """

    def __init__(self, on_unknown: Callable[[str], None] | None = None) -> None:
        self._on_unknown = on_unknown

    def normalize(self, label: str | None) -> int | None:
        if label is None:
            return None
        key = _canonical_label(label)
        if not key:
            return None
        ordinal = RATING_LABELS.get(key)
        if ordinal is None and self._on_unknown is not None:
            self._on_unknown(label)
        return ordinal
