"""FastAPI dependency providers.

The store and transcription service live on ``app.state`` so the app
factory (and tests) decide which implementation backs a process.
"""

from typing import Annotated

from fastapi import Depends, Request

from ..adapters.db.kv.clinic_repository import KeyValueClinicRepository
from ..adapters.db.kv.patient_repository import KeyValuePatientRepository
from ..adapters.external.transcription_service_azure_openai import (
    AzureOpenAITranscriptionService,
)
from ..application.ports.repositories.clinic_repo import ClinicRepository
from ..application.ports.repositories.patient_repo import PatientRepository
from ..application.ports.services.transcription_service import TranscriptionService
from ..application.ports.storage.key_value_store import KeyValueStore
from ..core.config import Settings, get_settings
from ..core.exceptions import ConfigurationError
from ..core.structured_logger import get_logger
from .errors import ServiceUnavailableError

LOGGER = get_logger("clinicdesk.api")


def get_kv_store(request: Request) -> KeyValueStore:
    """Get the process-wide key-value store."""
    return request.app.state.kv_store


SettingsDep = Annotated[Settings, Depends(get_settings)]
KeyValueStoreDep = Annotated[KeyValueStore, Depends(get_kv_store)]


def get_patient_repository(store: KeyValueStoreDep) -> PatientRepository:
    """Get patient repository instance."""
    return KeyValuePatientRepository(store)


def get_clinic_repository(store: KeyValueStoreDep, settings: SettingsDep) -> ClinicRepository:
    """Get clinic repository instance."""
    return KeyValueClinicRepository(
        store,
        default_clinic_id=settings.clinic.legacy_default_clinic_id,
        migration_lock_ttl_seconds=settings.clinic.migration_lock_ttl_seconds,
    )


def get_transcription_service(request: Request, settings: SettingsDep) -> TranscriptionService:
    """Get transcription service instance (built once per app)."""
    service = getattr(request.app.state, "transcription_service", None)
    if service is None:
        try:
            service = AzureOpenAITranscriptionService(settings.azure_openai, settings.transcription)
        except ConfigurationError as e:
            LOGGER.error("Transcription service unavailable", error=e.message)
            raise ServiceUnavailableError("Transcription is not configured") from e
        request.app.state.transcription_service = service
    return service


# Dependency annotations for FastAPI
PatientRepositoryDep = Annotated[PatientRepository, Depends(get_patient_repository)]
ClinicRepositoryDep = Annotated[ClinicRepository, Depends(get_clinic_repository)]
TranscriptionServiceDep = Annotated[TranscriptionService, Depends(get_transcription_service)]
