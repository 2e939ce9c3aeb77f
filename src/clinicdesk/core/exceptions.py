"""
Exception handling for the ClinicDesk application.

This module provides custom exception classes for the infrastructure
layers of the application following Clean Architecture principles.
Business rule violations live in ``clinicdesk.domain.errors``.
"""

from typing import Any, Dict, Optional


class ClinicDeskException(Exception):
    """Base exception class for the ClinicDesk application."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(ClinicDeskException):
    """Raised when there's a configuration error."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, "CONFIG_ERROR", details)


class StoreError(ClinicDeskException):
    """Raised when a key-value store command fails."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, "STORE_ERROR", details)


class ExternalServiceError(ClinicDeskException):
    """Raised when there's an external service error."""

    def __init__(
        self, service: str, message: str, details: Optional[Dict[str, Any]] = None
    ) -> None:
        self.service = service
        full_message = f"{service} service error: {message}"
        super().__init__(full_message, "EXTERNAL_SERVICE_ERROR", details)


class TranscriptionError(ExternalServiceError):
    """Raised when audio transcription fails."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__("Transcription", message, details)
