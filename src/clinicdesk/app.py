"""
FastAPI application factory and main app configuration.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .adapters.db.kv.clinic_repository import KeyValueClinicRepository
from .adapters.storage.redis_store import RedisKeyValueStore
from .api.errors import ERROR_KIND_STATUS, APIError
from .api.routers import auth, clinics, debug, health, patients, transcription
from .api.schemas.common import ErrorResponse
from .application.ports.services.transcription_service import TranscriptionService
from .application.ports.storage.key_value_store import KeyValueStore
from .core.config import get_settings
from .core.exceptions import StoreError
from .core.structured_logger import configure_logging, get_logger
from .domain.errors import DomainError, ErrorKind
from .middleware.performance_middleware import PerformanceMiddleware
from .middleware.request_id_middleware import RequestIDMiddleware

logger = get_logger("clinicdesk")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings = get_settings()
    configure_logging(settings.logging.level, settings.logging.format)
    logger.info(
        "Starting ClinicDesk",
        version=settings.app_version,
        environment=settings.app_env,
        debug_routes=settings.debug_routes_enabled,
    )

    owns_store = app.state.kv_store is None
    if owns_store:
        app.state.kv_store = RedisKeyValueStore.from_settings(settings.redis)

    if settings.clinic.migrate_on_startup:
        clinic_repo = KeyValueClinicRepository(
            app.state.kv_store,
            default_clinic_id=settings.clinic.legacy_default_clinic_id,
            migration_lock_ttl_seconds=settings.clinic.migration_lock_ttl_seconds,
        )
        try:
            report = await clinic_repo.migrate_legacy_data()
            logger.info(
                "Startup legacy migration finished",
                migrated=report.migrated,
                skipped_reason=report.skipped_reason,
                target_clinic_id=report.target_clinic_id,
            )
            if report.skipped_reason == "locked":
                # Clinic reads are not trusted until the other worker's copy lands.
                finished = await clinic_repo.wait_for_migration()
                logger.info("Waited for legacy migration elsewhere", finished=finished)
        except StoreError as e:
            # The service still starts; /health/ready reports the outage.
            logger.error("Startup legacy migration failed", error=e.message)

    yield

    if owns_store:
        await app.state.kv_store.close()
        app.state.kv_store = None
    logger.info("ClinicDesk stopped")


def _error_body(request: Request, error: str, message: str, details: Optional[dict] = None) -> dict:
    req_id = getattr(request.state, "request_id", None)
    return ErrorResponse(
        error=error,
        message=message,
        request_id=req_id or "",
        details=details or {},
    ).model_dump()


def create_app(
    kv_store: Optional[KeyValueStore] = None,
    transcription_service: Optional[TranscriptionService] = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    ``kv_store`` and ``transcription_service`` replace the Redis and Azure
    OpenAI backed defaults; a supplied store is not closed on shutdown.
    """
    settings = get_settings()

    app = FastAPI(
        title="ClinicDesk",
        description="Multi-clinic front desk queue and doctor workflow API",
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.kv_store = kv_store
    app.state.transcription_service = transcription_service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.allowed_origins,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=settings.cors.allowed_methods,
        allow_headers=settings.cors.allowed_headers,
        expose_headers=["X-Request-ID", "X-Process-Time"],
    )
    app.add_middleware(PerformanceMiddleware)
    # Outermost, so every other layer sees request.state.request_id
    app.add_middleware(RequestIDMiddleware)

    # Health → Clinics → Auth → Patients → Transcription → Debug
    app.include_router(health.router)
    app.include_router(clinics.router)
    app.include_router(auth.router)
    app.include_router(patients.router)
    app.include_router(transcription.router)
    if settings.debug_routes_enabled:
        app.include_router(debug.router)

    @app.get("/", tags=["health"])
    async def root():
        """Root endpoint with API information."""
        return {
            "service": settings.app_name,
            "version": settings.app_version,
            "environment": settings.app_env,
            "status": "running",
            "docs": "/docs",
            "endpoints": {
                "health": "/health",
                "register_clinic": "POST /clinics",
                "clinic_picker": "GET /clinics",
                "login": "POST /auth/login",
                "add_patient": "POST /clinics/{clinic_id}/patients",
                "waiting_room": "GET /clinics/{clinic_id}/patients/waiting",
                "doctor_room": "GET /clinics/{clinic_id}/patients/with-doctor",
                "patient_history": "GET /clinics/{clinic_id}/patients/history",
                "past_records": "GET /clinics/{clinic_id}/patients/past-records",
                "transcribe": "POST /transcription",
            },
        }

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        return JSONResponse(
            status_code=ERROR_KIND_STATUS[exc.kind],
            content=_error_body(request, exc.kind.value, exc.message, exc.details),
        )

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        logger.error("Unhandled store error", path=request.url.path, error=exc.message)
        return JSONResponse(
            status_code=ERROR_KIND_STATUS[ErrorKind.STORE],
            content=_error_body(
                request, ErrorKind.STORE.value, "The clinic data store is unavailable. Please try again."
            ),
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=_error_body(request, ErrorKind.VALIDATION.value, str(exc)),
        )

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError):
        logger.warning("API error", code=exc.code, http_status=exc.http_status, error=exc.message)
        return JSONResponse(
            status_code=exc.http_status,
            content=_error_body(request, exc.code, exc.message, exc.details),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        error_details = jsonable_encoder(exc.errors())
        error_messages = []
        for error in error_details:
            loc = " -> ".join(str(x) for x in error.get("loc", []))
            error_messages.append(f"{loc}: {error.get('msg', 'Validation error')}")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=_error_body(
                request,
                ErrorKind.VALIDATION.value,
                f"Input validation failed: {'; '.join(error_messages)}",
                {"errors": error_details, "path": request.url.path},
            ),
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception):
        logger.error("Unhandled error", exc_info=True, path=request.url.path, error_type=type(exc).__name__)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(
                request, "INTERNAL_ERROR", "An unexpected error has occurred. Please try again later."
            ),
        )

    return app


# Create the app instance
app = create_app()
