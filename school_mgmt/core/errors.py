from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Union

from fastapi import status
from pydantic import ValidationError


class ErrorKind(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    RATE_LIMITED = "RATE_LIMITED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


STATUS_CODES: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorKind.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

ErrorDetail = Union[str, List[Dict[str, Any]]]


@dataclass(frozen=True)
class Failure:
    """
    An expected failure returned (never raised) by guards and services.

    The dispatcher turns it into ``{"ok": false, "errors": ...}`` with the
    status code of its kind.
    """
    kind: ErrorKind
    errors: ErrorDetail

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]

    def to_envelope(self) -> Dict[str, Any]:
        return {"ok": False, "errors": self.errors}


def validation_error(errors: ErrorDetail = "Validation error") -> Failure:
    return Failure(ErrorKind.VALIDATION_ERROR, errors)


def unauthorized(message: str = "unauthorized") -> Failure:
    return Failure(ErrorKind.UNAUTHORIZED, message)


def forbidden(message: str = "Forbidden") -> Failure:
    return Failure(ErrorKind.FORBIDDEN, message)


def not_found(message: str = "not found") -> Failure:
    return Failure(ErrorKind.NOT_FOUND, message)


def conflict(message: str) -> Failure:
    return Failure(ErrorKind.CONFLICT, message)


def rate_limited(message: str = "Too many requests, please try again later.") -> Failure:
    return Failure(ErrorKind.RATE_LIMITED, message)


def internal_error(message: str = "Internal server error") -> Failure:
    return Failure(ErrorKind.INTERNAL_ERROR, message)


def format_validation_errors(exc: ValidationError) -> List[Dict[str, Any]]:
    """Flatten pydantic errors into ``[{"field": ..., "message": ...}]``."""
    errors = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ())) or "body"
        errors.append({"field": field, "message": error.get("msg", "Invalid value")})
    return errors
