"""
Transcription service interface for doctor dictation.
"""

from abc import ABC, abstractmethod
from typing import Dict


class TranscriptionService(ABC):
    """Abstract service for speech-to-text and field extraction."""

    @abstractmethod
    async def transcribe(self, audio: bytes, content_type: str, filename: str = "recording.webm") -> str:
        """
        Transcribe dictated audio to text.

        Raises:
            TranscriptionError: when the speech-to-text call fails
        """
        pass

    @abstractmethod
    async def extract_fields(self, transcript: str) -> Dict[str, str]:
        """
        Split a transcript into symptoms, diagnosis, prescription and notes.

        Returns:
            Dict with any of the four keys that could be extracted

        Raises:
            TranscriptionError: when the extraction call fails
        """
        pass
