"""
Error taxonomy for the task board.

Every public operation converts failures into one of these kinds and hands
them back inside an `ActionResult`; nothing below is meant to escape an
operation boundary.
"""

from typing import Any, Dict, Optional


class TaskBoardError(Exception):
    """Base class. `kind` names the failure, `status_code` is its HTTP mapping."""

    kind = "TaskBoardError"
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


class ValidationError(TaskBoardError):
    """Caller input failed a required-field or shape check."""

    kind = "ValidationError"
    status_code = 400


class InvalidStatus(ValidationError):
    kind = "InvalidStatus"
    status_code = 400


class NotFound(TaskBoardError):
    kind = "NotFound"
    status_code = 404


class UpstreamError(TaskBoardError):
    """The language-model endpoint failed or returned no text."""

    kind = "UpstreamError"
    status_code = 502


class NoExtractableJSON(TaskBoardError):
    kind = "NoExtractableJSON"
    status_code = 422


class MalformedExtraction(TaskBoardError):
    kind = "MalformedExtraction"
    status_code = 422


class PersistenceError(TaskBoardError):
    kind = "PersistenceError"
    status_code = 500


ERROR_STATUS = {
    cls.kind: cls.status_code
    for cls in (
        TaskBoardError,
        ValidationError,
        InvalidStatus,
        NotFound,
        UpstreamError,
        NoExtractableJSON,
        MalformedExtraction,
        PersistenceError,
    )
}
