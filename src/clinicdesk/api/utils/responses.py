from typing import Any, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse

from ...core.exceptions import StoreError
from ...core.structured_logger import get_logger
from ...domain.errors import DomainError, ErrorKind
from ..errors import ERROR_KIND_STATUS
from ..schemas.common import ApiResponse, ErrorResponse

LOGGER = get_logger("clinicdesk.api")


def ok(request: Request, data: Any = None, message: str = "") -> ApiResponse[Any]:
    req_id = getattr(request.state, "request_id", None)
    return ApiResponse(success=True, message=message, request_id=req_id or "", data=data)


def fail(
    request: Request,
    error: str,
    message: str,
    details: Optional[dict] = None,
    status_code: int = status.HTTP_400_BAD_REQUEST,
) -> JSONResponse:
    req_id = getattr(request.state, "request_id", None)
    body = ErrorResponse(error=error, message=message, request_id=req_id or "", details=details or {})
    return JSONResponse(status_code=status_code, content=body.model_dump())


def fail_from_error(request: Request, exc: Exception, operation: str) -> JSONResponse:
    """Log a failed operation and turn it into an error envelope."""
    req_id = getattr(request.state, "request_id", None)
    if isinstance(exc, StoreError):
        LOGGER.error(
            "Store unavailable",
            operation=operation,
            request_id=req_id,
            error=exc.message,
            **exc.details,
        )
        return fail(
            request,
            error=ErrorKind.STORE.value,
            message="The clinic data store is unavailable. Please try again.",
            status_code=ERROR_KIND_STATUS[ErrorKind.STORE],
        )
    if isinstance(exc, DomainError):
        LOGGER.info(
            "Operation rejected",
            operation=operation,
            request_id=req_id,
            kind=exc.kind.value,
            error=exc.message,
        )
        return fail(
            request,
            error=exc.kind.value,
            message=exc.message,
            details=exc.details,
            status_code=ERROR_KIND_STATUS[exc.kind],
        )
    raise exc
