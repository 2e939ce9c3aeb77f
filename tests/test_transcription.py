"""
Dictation tests: use case degradation, Azure OpenAI adapter and endpoint.
"""

import base64
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from openai import APIConnectionError

from clinicdesk.adapters.external.transcription_service_azure_openai import (
    AzureOpenAITranscriptionService,
)
from clinicdesk.app import create_app
from clinicdesk.application.use_cases.transcribe_dictation import TranscribeDictationUseCase
from clinicdesk.core.config import AzureOpenAISettings, TranscriptionSettings, get_settings
from clinicdesk.core.exceptions import ConfigurationError, TranscriptionError

from conftest import StubTranscriptionService

AUDIO = b"\x1a\x45\xdf\xa3fake-webm-audio"


# -----------------------------------------------------------------------------
# Use case
# -----------------------------------------------------------------------------


async def test_dictation_split_into_fields(transcription_stub):
    result = await TranscribeDictationUseCase(transcription_stub).execute(AUDIO, "audio/webm")

    assert result.text.startswith("Patient has a cough")
    assert result.analysis == {"symptoms": "cough", "diagnosis": "bronchitis", "prescription": "amoxicillin"}
    assert result.warnings == []
    assert transcription_stub.calls[0] == ("transcribe", len(AUDIO), "audio/webm", "recording.webm")


async def test_transcription_failure_returns_empty_result():
    result = await TranscribeDictationUseCase(StubTranscriptionService(fail_on="transcribe")).execute(
        AUDIO, "audio/webm"
    )

    assert result.text == ""
    assert result.analysis == {}
    assert result.warnings == ["transcription_failed"]


async def test_empty_transcript_skips_extraction():
    service = StubTranscriptionService(text="   ")

    result = await TranscribeDictationUseCase(service).execute(AUDIO, "audio/webm")

    assert result.warnings == ["empty_transcript"]
    assert [call[0] for call in service.calls] == ["transcribe"]


async def test_extraction_failure_keeps_transcript():
    service = StubTranscriptionService(text="Take rest.", fail_on="extract")

    result = await TranscribeDictationUseCase(service).execute(AUDIO, "audio/webm")

    assert result.text == "Take rest."
    assert result.analysis == {}
    assert result.warnings == ["extraction_failed"]


async def test_blank_extracted_fields_are_dropped():
    service = StubTranscriptionService(text="Notes only.", fields={"notes": "rest", "diagnosis": "  "})

    result = await TranscribeDictationUseCase(service).execute(AUDIO, "audio/webm")

    assert result.analysis == {"notes": "rest"}


# -----------------------------------------------------------------------------
# Azure OpenAI adapter
# -----------------------------------------------------------------------------


def _chat_settings():
    return AzureOpenAISettings(endpoint="https://example.openai.azure.com/", api_key="key")


def _clients(transcript="Cough for three days.", content='{"symptoms": "cough"}'):
    transcription_client = MagicMock()
    transcription_client.audio.transcriptions.create = AsyncMock(return_value=SimpleNamespace(text=transcript))
    chat_client = MagicMock()
    chat_client.chat.completions.create = AsyncMock(
        return_value=SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])
    )
    return chat_client, transcription_client


def _service(chat_client, transcription_client):
    return AzureOpenAITranscriptionService(
        _chat_settings(),
        TranscriptionSettings(language="en"),
        chat_client=chat_client,
        transcription_client=transcription_client,
    )


async def test_adapter_transcribes_with_deployment_and_language():
    chat_client, transcription_client = _clients()
    service = _service(chat_client, transcription_client)

    text = await service.transcribe(AUDIO, "audio/webm", "memo.webm")

    assert text == "Cough for three days."
    kwargs = transcription_client.audio.transcriptions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-4o-transcribe"
    assert kwargs["language"] == "en"
    assert kwargs["file"] == ("memo.webm", AUDIO, "audio/webm")


async def test_adapter_extracts_fields_in_json_mode():
    chat_client, transcription_client = _clients(
        content='{"symptoms": ["cough", "fever"], "diagnosis": "flu", "notes": "", "other": "x"}'
    )
    service = _service(chat_client, transcription_client)

    fields = await service.extract_fields("Cough and fever. Flu.")

    assert fields == {"symptoms": "cough, fever", "diagnosis": "flu"}
    kwargs = chat_client.chat.completions.create.call_args.kwargs
    assert kwargs["response_format"] == {"type": "json_object"}
    assert kwargs["messages"][1] == {"role": "user", "content": "Cough and fever. Flu."}


async def test_adapter_rejects_invalid_json():
    chat_client, transcription_client = _clients(content="not json")
    with pytest.raises(TranscriptionError):
        await _service(chat_client, transcription_client).extract_fields("text")


async def test_adapter_wraps_openai_errors():
    chat_client, transcription_client = _clients()
    transcription_client.audio.transcriptions.create.side_effect = APIConnectionError(request=MagicMock())

    with pytest.raises(TranscriptionError):
        await _service(chat_client, transcription_client).transcribe(AUDIO, "audio/webm")


def test_adapter_requires_configuration():
    with pytest.raises(ConfigurationError):
        AzureOpenAITranscriptionService(AzureOpenAISettings(), TranscriptionSettings())


# -----------------------------------------------------------------------------
# Endpoint
# -----------------------------------------------------------------------------


def test_transcribe_uploaded_file(client):
    response = client.post("/transcription", files={"file": ("memo.webm", AUDIO, "audio/webm")})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["analysis"]["diagnosis"] == "bronchitis"
    assert data["analysis"]["notes"] is None
    assert data["warnings"] == []


def test_transcribe_base64_field(client, transcription_stub):
    response = client.post("/transcription", data={"audio": base64.b64encode(AUDIO).decode()})

    assert response.status_code == 200
    assert transcription_stub.calls[0][2] == "audio/webm"


def test_transcription_failure_is_not_an_http_error(kv_store):
    app = create_app(kv_store=kv_store, transcription_service=StubTranscriptionService(fail_on="transcribe"))
    with TestClient(app) as client:
        response = client.post("/transcription", files={"file": ("memo.webm", AUDIO, "audio/webm")})

    assert response.status_code == 200
    assert response.json()["data"] == {
        "text": "",
        "analysis": {"symptoms": None, "diagnosis": None, "prescription": None, "notes": None},
        "warnings": ["transcription_failed"],
    }


def test_missing_audio(client):
    response = client.post("/transcription", data={})
    assert response.status_code == 422
    assert response.json()["message"] == "No audio data provided"


def test_invalid_base64(client):
    response = client.post("/transcription", data={"audio": "***"})
    assert response.status_code == 422


def test_unsupported_content_type(client):
    response = client.post("/transcription", files={"file": ("notes.txt", b"hello", "text/plain")})
    assert response.status_code == 422
    assert response.json()["error"] == "VALIDATION_ERROR"


def test_audio_too_large(client):
    get_settings().audio.max_size_mb = 1
    response = client.post(
        "/transcription", files={"file": ("memo.webm", b"\0" * (1024 * 1024 + 1), "audio/webm")}
    )
    assert response.status_code == 413


def test_unconfigured_service_is_unavailable(kv_store, monkeypatch):
    monkeypatch.delenv("AZURE_OPENAI_ENDPOINT", raising=False)
    monkeypatch.delenv("AZURE_OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("TRANSCRIPTION_ENDPOINT", raising=False)
    monkeypatch.delenv("TRANSCRIPTION_API_KEY", raising=False)

    with TestClient(create_app(kv_store=kv_store)) as client:
        response = client.post("/transcription", files={"file": ("memo.webm", AUDIO, "audio/webm")})

    assert response.status_code == 503
    assert response.json()["error"] == "SERVICE_UNAVAILABLE"
