"""
Redis implementation of KeyValueStore.

Hash values are JSON text. Older writers stored some values as native
mappings, and clients may hand back ``bytes`` or ``str``; every read is
normalised to a ``dict`` here so nothing above this module sees the
difference.
"""

import json
from typing import Any, Dict, List, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError, WatchError

from ...application.ports.storage.key_value_store import KeyValueStore
from ...core.config import RedisSettings
from ...core.exceptions import StoreError
from ...core.structured_logger import get_logger

LOGGER = get_logger("clinicdesk.store")


def decode_record(raw: Any) -> Optional[Dict[str, Any]]:
    """Normalise a stored value to a record, or None if it is unusable."""
    if raw is None:
        return None
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            return None
    if isinstance(raw, str):
        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            return None
        return value if isinstance(value, dict) else None
    return None


def encode_value(value: Any) -> str:
    """Serialise a value for a hash field."""
    if isinstance(value, str):
        return value
    return json.dumps(value)


def _text(value: Any) -> str:
    return value.decode("utf-8") if isinstance(value, (bytes, bytearray)) else str(value)


class RedisKeyValueStore(KeyValueStore):
    """Redis implementation of KeyValueStore."""

    def __init__(self, client: Redis):
        self._client = client

    @classmethod
    def from_settings(cls, settings: RedisSettings) -> "RedisKeyValueStore":
        """Build a store from connection settings. The token is sent as the password."""
        client = Redis.from_url(
            settings.url,
            password=settings.token or None,
            socket_timeout=settings.socket_timeout,
            decode_responses=True,
        )
        return cls(client)

    async def _run(self, command: str, key: str, awaitable):
        try:
            return await awaitable
        except RedisError as e:
            LOGGER.error("Store command failed", command=command, key=key, error=str(e))
            raise StoreError(f"Store command {command} failed", {"command": command, "key": key}) from e

    async def hash_get_all(self, key: str) -> Dict[str, Dict[str, Any]]:
        raw = await self._run("HGETALL", key, self._client.hgetall(key))
        records: Dict[str, Dict[str, Any]] = {}
        for field, value in (raw or {}).items():
            record = decode_record(value)
            if record is None:
                LOGGER.warning("Skipping undecodable record", key=key, field=_text(field))
                continue
            records[_text(field)] = record
        return records

    async def hash_get_all_raw(self, key: str) -> Dict[str, str]:
        raw = await self._run("HGETALL", key, self._client.hgetall(key))
        return {_text(field): _text(value) for field, value in (raw or {}).items()}

    async def hash_get(self, key: str, field: str) -> Optional[Dict[str, Any]]:
        raw = await self._run("HGET", key, self._client.hget(key, field))
        record = decode_record(raw)
        if raw is not None and record is None:
            LOGGER.warning("Skipping undecodable record", key=key, field=field)
        return record

    async def hash_set(self, key: str, field: str, value: Any) -> None:
        await self._run("HSET", key, self._client.hset(key, field, encode_value(value)))

    async def hash_delete(self, key: str, *fields: str) -> int:
        if not fields:
            return 0
        return int(await self._run("HDEL", key, self._client.hdel(key, *fields)))

    async def hash_length(self, key: str) -> int:
        return int(await self._run("HLEN", key, self._client.hlen(key)))

    async def list_push_head(self, key: str, *values: str) -> int:
        if not values:
            return await self.list_length(key)
        return int(await self._run("LPUSH", key, self._client.lpush(key, *values)))

    async def list_remove(self, key: str, value: str) -> int:
        return int(await self._run("LREM", key, self._client.lrem(key, 0, value)))

    async def list_range(self, key: str, start: int = 0, end: int = -1) -> List[str]:
        values = await self._run("LRANGE", key, self._client.lrange(key, start, end))
        return [_text(v) for v in values or []]

    async def list_length(self, key: str) -> int:
        return int(await self._run("LLEN", key, self._client.llen(key)))

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        return int(await self._run("DEL", ",".join(keys), self._client.delete(*keys)))

    async def exists(self, key: str) -> bool:
        return bool(await self._run("EXISTS", key, self._client.exists(key)))

    async def keys(self, pattern: str) -> List[str]:
        values = await self._run("KEYS", pattern, self._client.keys(pattern))
        return sorted(_text(v) for v in values or [])

    async def set_if_absent(self, key: str, value: str, ttl_seconds: int) -> bool:
        result = await self._run("SET", key, self._client.set(key, value, nx=True, ex=ttl_seconds))
        return bool(result)

    async def delete_if_equals(self, key: str, value: str) -> bool:
        return await self._run("DEL", key, self._delete_if_equals(key, value))

    async def _delete_if_equals(self, key: str, value: str) -> bool:
        try:
            async with self._client.pipeline(transaction=True) as pipe:
                await pipe.watch(key)
                current = await pipe.get(key)
                if current is None or _text(current) != value:
                    return False
                pipe.multi()
                pipe.delete(key)
                await pipe.execute()
                return True
        except WatchError:
            # Rewritten between GET and DEL, so it is no longer ours.
            return False

    async def ping(self) -> bool:
        return bool(await self._run("PING", "", self._client.ping()))

    async def close(self) -> None:
        await self._client.aclose()
