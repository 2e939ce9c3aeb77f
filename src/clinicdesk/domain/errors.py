"""
Domain-specific error types for business rule violations.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Closed set of failure categories surfaced to callers."""

    VALIDATION = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    STORE = "STORE_ERROR"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    CLINIC_NOT_FOUND = "CLINIC_NOT_FOUND"


class DomainError(Exception):
    """Base domain error."""

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.error_code = error_code or self.kind.value
        self.details = details or {}
        super().__init__(self.message)


class InvalidPatientDataError(DomainError):
    """Invalid patient data."""

    def __init__(self, field: str, message: str, value: Any = None) -> None:
        super().__init__(
            message, ErrorKind.VALIDATION.value, {"field": field, "value": value}
        )


class InvalidClinicDataError(DomainError):
    """Invalid clinic registration data."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message, ErrorKind.VALIDATION.value, {"field": field})


class InvalidStatusTransitionError(DomainError):
    """Requested lifecycle change is not allowed from the current status."""

    def __init__(self, patient_id: str, current: str, requested: str) -> None:
        message = f"Patient '{patient_id}' cannot move from '{current}' to '{requested}'"
        super().__init__(
            message,
            ErrorKind.VALIDATION.value,
            {"patient_id": patient_id, "current": current, "requested": requested},
        )


class PatientNotFoundError(DomainError):
    """Patient not found."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, patient_id: str, clinic_id: Optional[str] = None) -> None:
        message = f"Patient with ID '{patient_id}' not found"
        super().__init__(
            message, ErrorKind.NOT_FOUND.value, {"patient_id": patient_id, "clinic_id": clinic_id}
        )


class ClinicNotFoundError(DomainError):
    """Clinic not found."""

    kind = ErrorKind.CLINIC_NOT_FOUND

    def __init__(self, clinic_id: str) -> None:
        super().__init__("Clinic not found", ErrorKind.CLINIC_NOT_FOUND.value, {"clinic_id": clinic_id})


class InvalidCredentialsError(DomainError):
    """Username or password did not match the clinic admin record."""

    kind = ErrorKind.INVALID_CREDENTIALS

    def __init__(self) -> None:
        super().__init__("Invalid credentials", ErrorKind.INVALID_CREDENTIALS.value)
