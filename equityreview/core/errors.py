from __future__ import annotations


class ParseError(ValueError):
    """Raised when an uploaded review workbook cannot be turned into records."""


class PerRecordAnalysisError(RuntimeError):
    """Wraps a failure raised while analysing a single employee record."""

    def __init__(self, index: int, employee_id: str, cause: BaseException) -> None:
        super().__init__(f"analysis failed for record {index} ({employee_id}): {cause}")
        self.index = index
        self.employee_id = employee_id
        self.cause = cause


class WriteError(RuntimeError):
    """Raised when the results workbook could not be produced."""


class HistorySinkError(RuntimeError):
    """Raised when the run-history sink rejects or cannot receive an entry."""


class ProviderError(RuntimeError):
    """Raised when an external analysis provider returns an error."""


class JobStateError(RuntimeError):
    """Raised when a job update would violate the job lifecycle."""


class UploadTooLargeError(ValueError):
    """Raised when an upload exceeds the configured size cap."""
