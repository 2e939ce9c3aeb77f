"""
String utility functions for identifiers.
"""

import secrets
import time
from urllib.parse import unquote


def generate_id(prefix: str) -> str:
    """Generate ``{prefix}{epoch_ms}-{8 hex chars}``.

    The random suffix keeps ids unique when two are created in the same
    millisecond.
    """
    return f"{prefix}{int(time.time() * 1000)}-{secrets.token_hex(4)}"


def decode_identifier(raw: str) -> str:
    """Percent-decode an id taken from a URL.

    Values that were never encoded, or whose escapes are malformed, are
    returned unchanged.
    """
    try:
        return unquote(raw, errors="strict")
    except UnicodeDecodeError:
        return raw
