"""Typed failures raised by the classroom service and translated by the routers."""

import enum


class ErrorKind(str, enum.Enum):
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    VALIDATION = "VALIDATION"
    INVARIANT_VIOLATION = "INVARIANT_VIOLATION"


class ClassroomError(ValueError):
    """Base failure carrying an error kind and the HTTP status it maps to."""

    kind = ErrorKind.VALIDATION
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_detail(self) -> dict:
        return {"kind": self.kind.value, "message": self.message}


class NotFoundError(ClassroomError):
    kind = ErrorKind.NOT_FOUND
    status_code = 404


class ForbiddenError(ClassroomError):
    kind = ErrorKind.FORBIDDEN
    status_code = 403


class InvariantViolationError(ClassroomError):
    kind = ErrorKind.INVARIANT_VIOLATION
    status_code = 400
