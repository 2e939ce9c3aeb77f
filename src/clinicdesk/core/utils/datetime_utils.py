"""
Timestamp helpers. Persisted records use epoch milliseconds.
"""

import time


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)
