"""
Dictation schemas.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class DictationAnalysis(BaseModel):
    symptoms: Optional[str] = None
    diagnosis: Optional[str] = None
    prescription: Optional[str] = None
    notes: Optional[str] = None


class DictationResponse(BaseModel):
    text: str = Field("", description="Transcript; empty when speech-to-text failed")
    analysis: DictationAnalysis = Field(default_factory=DictationAnalysis)
    warnings: List[str] = Field(default_factory=list)
