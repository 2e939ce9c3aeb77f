from fastapi import status

from ..domain.errors import ErrorKind

# HTTP status for each error kind surfaced by the domain and store layers.
ERROR_KIND_STATUS = {
    ErrorKind.VALIDATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CLINIC_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.STORE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


class APIError(Exception):
    def __init__(self, code: str, message: str, http_status: int = 400, details: dict = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.http_status = http_status
        self.details = details


class ValidationError(APIError):
    def __init__(self, message: str, details: dict = None):
        super().__init__(ErrorKind.VALIDATION.value, message, status.HTTP_422_UNPROCESSABLE_ENTITY, details)


class PayloadTooLargeError(APIError):
    def __init__(self, message: str, details: dict = None):
        super().__init__(ErrorKind.VALIDATION.value, message, status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, details)


class ServiceUnavailableError(APIError):
    def __init__(self, message: str, details: dict = None):
        super().__init__("SERVICE_UNAVAILABLE", message, status.HTTP_503_SERVICE_UNAVAILABLE, details)
