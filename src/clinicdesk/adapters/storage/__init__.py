"""
Storage adapters for ClinicDesk.

This module contains the Redis-backed key-value store.
"""

from .redis_store import RedisKeyValueStore

__all__ = [
    "RedisKeyValueStore",
]
