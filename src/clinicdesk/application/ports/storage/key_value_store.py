"""
Key-value store interface: hash-map and list primitives addressed by string keys.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class KeyValueStore(ABC):
    """Abstract key-value store.

    Hash reads return decoded records (``dict``) and drop undecodable
    values, except ``hash_get_all_raw`` which returns stored text as is.
    Writes accept mappings and serialize them to JSON text. Every failure
    is raised as ``StoreError``.
    """

    @abstractmethod
    async def hash_get_all(self, key: str) -> Dict[str, Dict[str, Any]]:
        """Return every field of a hash as decoded records."""
        pass

    @abstractmethod
    async def hash_get_all_raw(self, key: str) -> Dict[str, str]:
        """Return every field of a hash as stored text, nothing dropped."""
        pass

    @abstractmethod
    async def hash_get(self, key: str, field: str) -> Optional[Dict[str, Any]]:
        """Return one decoded record, or None."""
        pass

    @abstractmethod
    async def hash_set(self, key: str, field: str, value: Any) -> None:
        """Write one field. Mappings are stored as JSON text."""
        pass

    @abstractmethod
    async def hash_delete(self, key: str, *fields: str) -> int:
        """Delete fields, returning how many existed."""
        pass

    @abstractmethod
    async def hash_length(self, key: str) -> int:
        pass

    @abstractmethod
    async def list_push_head(self, key: str, *values: str) -> int:
        """Push values onto the head of a list."""
        pass

    @abstractmethod
    async def list_remove(self, key: str, value: str) -> int:
        """Remove every occurrence of ``value``. Absent values are a no-op."""
        pass

    @abstractmethod
    async def list_range(self, key: str, start: int = 0, end: int = -1) -> List[str]:
        pass

    @abstractmethod
    async def list_length(self, key: str) -> int:
        pass

    @abstractmethod
    async def delete(self, *keys: str) -> int:
        pass

    @abstractmethod
    async def exists(self, key: str) -> bool:
        pass

    @abstractmethod
    async def keys(self, pattern: str) -> List[str]:
        """List keys matching a glob pattern. Debug use only."""
        pass

    @abstractmethod
    async def set_if_absent(self, key: str, value: str, ttl_seconds: int) -> bool:
        """Atomically set ``key`` with an expiry unless it exists."""
        pass

    @abstractmethod
    async def delete_if_equals(self, key: str, value: str) -> bool:
        """Atomically delete ``key`` only while it still holds ``value``."""
        pass

    @abstractmethod
    async def ping(self) -> bool:
        pass

    @abstractmethod
    async def close(self) -> None:
        pass
