"""Dictation DTOs."""

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class DictationResult:
    """Transcript plus whatever fields could be extracted from it."""

    text: str = ""
    analysis: Dict[str, str] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
