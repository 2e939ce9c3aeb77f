"""
Shared fixtures: an in-memory Redis per test and an app wired to it.
"""

from typing import Dict, List

import fakeredis
import fakeredis.aioredis
import pytest
from fastapi.testclient import TestClient

from clinicdesk.adapters.db.kv.clinic_repository import KeyValueClinicRepository
from clinicdesk.adapters.db.kv.patient_repository import KeyValuePatientRepository
from clinicdesk.adapters.storage.redis_store import RedisKeyValueStore
from clinicdesk.app import create_app
from clinicdesk.application.ports.services.transcription_service import TranscriptionService
from clinicdesk.core.config import reset_settings
from clinicdesk.core.exceptions import TranscriptionError


class StubTranscriptionService(TranscriptionService):
    """Scripted transcription backend; records every call."""

    def __init__(self, text: str = "", fields: Dict[str, str] = None, fail_on: str = ""):
        self.text = text
        self.fields = fields or {}
        self.fail_on = fail_on
        self.calls: List[tuple] = []

    async def transcribe(self, audio: bytes, content_type: str, filename: str = "recording.webm") -> str:
        self.calls.append(("transcribe", len(audio), content_type, filename))
        if self.fail_on == "transcribe":
            raise TranscriptionError("speech service down")
        return self.text

    async def extract_fields(self, transcript: str) -> Dict[str, str]:
        self.calls.append(("extract_fields", transcript))
        if self.fail_on == "extract":
            raise TranscriptionError("chat service down")
        return dict(self.fields)


@pytest.fixture(autouse=True)
def testing_env(monkeypatch):
    """Run every test against fresh settings in the testing environment."""
    monkeypatch.setenv("APP_ENV", "testing")
    monkeypatch.setenv("LOG_FORMAT", "text")
    monkeypatch.delenv("ENABLE_DEBUG_ROUTES", raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def redis_server():
    return fakeredis.FakeServer()


@pytest.fixture
def redis_sync(redis_server):
    """Synchronous client on the same server, for seeding and inspecting raw keys."""
    return fakeredis.FakeRedis(server=redis_server, decode_responses=True)


@pytest.fixture
def kv_store(redis_server):
    client = fakeredis.aioredis.FakeRedis(server=redis_server, decode_responses=True)
    return RedisKeyValueStore(client)


@pytest.fixture
def patient_repo(kv_store):
    return KeyValuePatientRepository(kv_store)


@pytest.fixture
def clinic_repo(kv_store):
    return KeyValueClinicRepository(kv_store, default_clinic_id="clinic1", migration_lock_ttl_seconds=30)


@pytest.fixture
def transcription_stub():
    return StubTranscriptionService(
        text="Patient has a cough. Diagnosis: bronchitis. Prescribe amoxicillin.",
        fields={"symptoms": "cough", "diagnosis": "bronchitis", "prescription": "amoxicillin"},
    )


@pytest.fixture
def client(kv_store, transcription_stub):
    """Test client with lifespan (startup migration) run against the fake store."""
    app = create_app(kv_store=kv_store, transcription_service=transcription_stub)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def registered_clinic(client) -> Dict[str, str]:
    """Sign up the 'Acme' clinic through the API."""
    response = client.post(
        "/clinics",
        json={"name": "Acme", "admin_username": "doc", "admin_password": "pw123"},
    )
    assert response.status_code == 201
    return response.json()["data"]
