"""Error taxonomy shared by the services, the stores and the HTTP layer.

Every failure carries a stable ``kind`` and an HTTP status code so the API
can render it without knowing which service raised it.
"""
from typing import Any, Optional


class TutoringError(Exception):
    """Base class for every failure an operation can report."""

    status_code: int = 400
    default_message: str = "Request failed"

    def __init__(self, message: Optional[str] = None, **details: Any):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> dict:
        body = {"kind": self.kind, "detail": self.message}
        if self.details:
            body["details"] = self.details
        return body


class Unauthorized(TutoringError):
    status_code = 401
    default_message = "Not authenticated"


class Forbidden(TutoringError):
    status_code = 403
    default_message = "Insufficient permissions"


class NotFound(TutoringError):
    status_code = 404
    default_message = "Not found"


class ValidationError(TutoringError):
    status_code = 422
    default_message = "Invalid input"


class InvalidAmountError(ValidationError):
    default_message = "Amount must be greater than zero"


class InvalidFeeKindError(ValidationError):
    default_message = "Fee kind must be 'attendance' or 'books'"


class DuplicateGroupNameError(ValidationError):
    default_message = "A group with this name already exists"


class InvalidScoreError(ValidationError):
    default_message = "Score is out of range"


class NoOpenRoundError(ValidationError):
    default_message = "No attendance round is pending for this student"


class DuplicateAttendanceError(TutoringError):
    status_code = 409
    default_message = "Student has already recorded attendance for this round"


class NothingToReverseError(TutoringError):
    status_code = 409
    default_message = "There is no payment left to reverse"


class PersistenceError(TutoringError):
    status_code = 503
    default_message = "Storage backend failure"


class ConcurrentModificationError(PersistenceError):
    status_code = 409
    default_message = "The record was modified by another request, retry the operation"
