"""Dictation transcription endpoint."""

import base64
import binascii
from typing import Optional

from fastapi import APIRouter, File, Form, Request, UploadFile

from ...application.use_cases.transcribe_dictation import TranscribeDictationUseCase
from ...core.structured_logger import get_logger
from ..deps import SettingsDep, TranscriptionServiceDep
from ..errors import PayloadTooLargeError, ValidationError
from ..schemas.common import ApiResponse, ErrorResponse
from ..schemas.transcription import DictationAnalysis, DictationResponse
from ..utils.responses import ok

router = APIRouter(prefix="/transcription", tags=["Transcription"])
LOGGER = get_logger("clinicdesk.transcription")

BASE64_CONTENT_TYPE = "audio/webm"


@router.post(
    "",
    response_model=ApiResponse[DictationResponse],
    responses={
        413: {"model": ErrorResponse, "description": "Audio too large"},
        422: {"model": ErrorResponse, "description": "Missing or unsupported audio"},
        503: {"model": ErrorResponse, "description": "Transcription not configured"},
    },
)
async def transcribe_dictation(
    request: Request,
    settings: SettingsDep,
    service: TranscriptionServiceDep,
    file: Optional[UploadFile] = File(None, description="Recorded audio"),
    audio: Optional[str] = Form(None, description="Base64 audio (webm) for browser recorders"),
):
    """
    Transcribe a doctor's dictation and split it into medical-detail fields.

    Accepts either a multipart ``file`` or a base64 ``audio`` form field.
    Failures of the speech or extraction stage return an empty or partial
    result with ``warnings`` rather than an error.
    """
    if file is not None:
        data = await file.read()
        content_type = (file.content_type or "application/octet-stream").split(";")[0].strip()
        filename = file.filename or "recording.webm"
    elif audio:
        try:
            data = base64.b64decode(audio, validate=True)
        except (binascii.Error, ValueError):
            raise ValidationError("Audio field is not valid base64")
        content_type = BASE64_CONTENT_TYPE
        filename = "recording.webm"
    else:
        raise ValidationError("No audio data provided")

    if not data:
        raise ValidationError("Audio is empty")
    max_bytes = settings.audio.max_size_mb * 1024 * 1024
    if len(data) > max_bytes:
        raise PayloadTooLargeError(
            f"Audio too large ({len(data) / (1024 * 1024):.1f}MB, max {settings.audio.max_size_mb}MB)",
            {"max_size_mb": settings.audio.max_size_mb},
        )
    if content_type not in settings.audio.allowed_content_types:
        raise ValidationError(
            f"Unsupported audio type: {content_type}",
            {"allowed": settings.audio.allowed_content_types},
        )

    result = await TranscribeDictationUseCase(service).execute(data, content_type, filename)
    if result.warnings:
        LOGGER.warning("Dictation processed with warnings", warnings=result.warnings, audio_bytes=len(data))

    return ok(
        request,
        data=DictationResponse(
            text=result.text,
            analysis=DictationAnalysis(**result.analysis),
            warnings=result.warnings,
        ),
        message="Transcribed" if result.text else "No transcript available",
    )
