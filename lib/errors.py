"""
Exception hierarchy for Exam Board.

Routers translate these into HTTP responses:
    ValidationError -> 400
    NotFoundError   -> 404
    StoreError      -> 500 (logged, generic message to caller)

RecordParseError never reaches a caller; the classifier logs it and skips
the record.
"""


class ExamBoardError(Exception):
    """Base class for all Exam Board errors."""


class ValidationError(ExamBoardError):
    """Input rejected before touching the store (e.g. batch out of range)."""


class NotFoundError(ExamBoardError):
    """A natural key matched zero rows on a mutating operation."""

    def __init__(self, key):
        self.key = key
        super().__init__(f"Exam not found: {key}")


class StoreError(ExamBoardError):
    """A query against the record store failed."""


class RecordParseError(ExamBoardError):
    """A stored record's date/time could not be parsed."""


class ExamServiceError(ExamBoardError):
    """A call to the Exam Board HTTP API failed."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)
