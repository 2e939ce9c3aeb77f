"""Transcribe dictation use case.

Speech-to-text and field extraction are best effort: a failing stage adds a
warning and the caller still gets whatever was produced before it.
"""

from typing import List, Optional

from ...core.exceptions import TranscriptionError
from ...core.structured_logger import get_logger
from ...domain.entities.patient import MEDICAL_FIELDS
from ..dto.dictation_dto import DictationResult
from ..ports.services.transcription_service import TranscriptionService

LOGGER = get_logger("clinicdesk.transcription")


class TranscribeDictationUseCase:
    """Use case for turning dictated audio into medical-detail fields."""

    def __init__(self, transcription_service: TranscriptionService):
        self._transcription_service = transcription_service

    async def execute(self, audio: bytes, content_type: str, filename: Optional[str] = None) -> DictationResult:
        """Execute transcription followed by extraction."""
        warnings: List[str] = []

        try:
            text = await self._transcription_service.transcribe(
                audio, content_type, filename or "recording.webm"
            )
        except TranscriptionError as e:
            LOGGER.error("Transcription failed", error=e.message, audio_bytes=len(audio))
            return DictationResult(warnings=["transcription_failed"])

        text = (text or "").strip()
        if not text:
            return DictationResult(warnings=["empty_transcript"])

        try:
            extracted = await self._transcription_service.extract_fields(text)
        except TranscriptionError as e:
            LOGGER.error("Field extraction failed", error=e.message, transcript_chars=len(text))
            extracted = {}
            warnings.append("extraction_failed")

        analysis = {
            name: str(extracted.get(name) or "").strip()
            for name in MEDICAL_FIELDS
        }
        analysis = {name: value for name, value in analysis.items() if value}
        return DictationResult(text=text, analysis=analysis, warnings=warnings)
