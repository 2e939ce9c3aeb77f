"""
Azure OpenAI-based dictation service.

Speech-to-text uses the transcription deployment (gpt-4o-transcribe by
default); field extraction uses the chat deployment in JSON mode.
"""

import json
from typing import Dict, Optional

from openai import AsyncAzureOpenAI, OpenAIError

from clinicdesk.application.ports.services.transcription_service import TranscriptionService
from clinicdesk.core.config import AzureOpenAISettings, TranscriptionSettings
from clinicdesk.core.exceptions import ConfigurationError, TranscriptionError
from clinicdesk.core.structured_logger import get_logger
from clinicdesk.domain.entities.patient import MEDICAL_FIELDS

LOGGER = get_logger("clinicdesk.transcription")

EXTRACTION_SYSTEM_PROMPT = """You are a medical assistant that extracts structured information from a doctor's dictation.
Extract the following fields if present:
- symptoms: Patient's symptoms
- diagnosis: Doctor's diagnosis
- prescription: Medications prescribed
- notes: Additional notes or instructions

Return the information in JSON format with these fields."""


class AzureOpenAITranscriptionService(TranscriptionService):
    def __init__(
        self,
        chat_settings: AzureOpenAISettings,
        transcription_settings: TranscriptionSettings,
        chat_client: Optional[AsyncAzureOpenAI] = None,
        transcription_client: Optional[AsyncAzureOpenAI] = None,
    ) -> None:
        self._chat_deployment = chat_settings.deployment_name
        self._transcription_deployment = transcription_settings.deployment_name
        self._language = transcription_settings.language

        if chat_client is None:
            if not chat_settings.endpoint or not chat_settings.api_key:
                raise ConfigurationError(
                    "Azure OpenAI is not configured. Set AZURE_OPENAI_ENDPOINT and AZURE_OPENAI_API_KEY."
                )
            chat_client = AsyncAzureOpenAI(
                api_key=chat_settings.api_key,
                api_version=chat_settings.api_version,
                azure_endpoint=chat_settings.endpoint,
            )
        if transcription_client is None:
            endpoint = transcription_settings.endpoint or chat_settings.endpoint
            api_key = transcription_settings.api_key or chat_settings.api_key
            if not endpoint or not api_key:
                raise ConfigurationError(
                    "Transcription is not configured. Set TRANSCRIPTION_ENDPOINT and TRANSCRIPTION_API_KEY."
                )
            transcription_client = AsyncAzureOpenAI(
                api_key=api_key,
                api_version=transcription_settings.api_version,
                azure_endpoint=endpoint,
            )

        self._chat_client = chat_client
        self._transcription_client = transcription_client

    async def transcribe(self, audio: bytes, content_type: str, filename: str = "recording.webm") -> str:
        try:
            resp = await self._transcription_client.audio.transcriptions.create(
                model=self._transcription_deployment,
                file=(filename, audio, content_type),
                language=self._language,
            )
        except OpenAIError as e:
            raise TranscriptionError(str(e), {"deployment": self._transcription_deployment}) from e

        text = (getattr(resp, "text", None) or "").strip()
        LOGGER.info(
            "Dictation transcribed",
            deployment=self._transcription_deployment,
            audio_bytes=len(audio),
            transcript_chars=len(text),
        )
        return text

    async def extract_fields(self, transcript: str) -> Dict[str, str]:
        try:
            resp = await self._chat_client.chat.completions.create(
                model=self._chat_deployment,
                messages=[
                    {"role": "system", "content": EXTRACTION_SYSTEM_PROMPT},
                    {"role": "user", "content": transcript},
                ],
                response_format={"type": "json_object"},
            )
        except OpenAIError as e:
            raise TranscriptionError(str(e), {"deployment": self._chat_deployment}) from e

        content = resp.choices[0].message.content if resp.choices else None
        try:
            parsed = json.loads(content or "{}")
        except json.JSONDecodeError as e:
            raise TranscriptionError("Extraction returned invalid JSON", {"deployment": self._chat_deployment}) from e
        if not isinstance(parsed, dict):
            raise TranscriptionError("Extraction returned a non-object", {"deployment": self._chat_deployment})

        fields: Dict[str, str] = {}
        for key in MEDICAL_FIELDS:
            value = parsed.get(key)
            if isinstance(value, list):
                value = ", ".join(str(v) for v in value if v)
            if value:
                fields[key] = str(value)
        return fields
