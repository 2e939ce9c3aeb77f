"""
Utility functions shared across the ClinicDesk application.
"""

from .datetime_utils import now_ms
from .string_utils import decode_identifier, generate_id

__all__ = [
    "now_ms",
    "decode_identifier",
    "generate_id",
]
