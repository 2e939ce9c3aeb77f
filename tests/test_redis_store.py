"""
Redis store adapter tests: record normalisation and error mapping.
"""

import json

import fakeredis.aioredis
import pytest

from clinicdesk.adapters.storage.redis_store import RedisKeyValueStore, decode_record, encode_value
from clinicdesk.core.exceptions import StoreError


@pytest.mark.parametrize(
    "raw, expected",
    [
        ({"id": "p1"}, {"id": "p1"}),
        ('{"id": "p1"}', {"id": "p1"}),
        (b'{"id": "p1"}', {"id": "p1"}),
        (None, None),
        ("not json", None),
        ("[1, 2]", None),
        (b"\xff\xfe", None),
        (42, None),
    ],
)
def test_decode_record(raw, expected):
    assert decode_record(raw) == expected


def test_encode_value_keeps_strings():
    assert encode_value("already-json") == "already-json"
    assert json.loads(encode_value({"a": 1})) == {"a": 1}


async def test_hash_round_trip(kv_store):
    await kv_store.hash_set("h", "p1", {"id": "p1", "age": 3})
    assert await kv_store.hash_get("h", "p1") == {"id": "p1", "age": 3}
    assert await kv_store.hash_get("h", "missing") is None
    assert await kv_store.hash_length("h") == 1


async def test_hash_get_all_skips_undecodable(kv_store, redis_sync):
    redis_sync.hset("h", "good", json.dumps({"id": "good"}))
    redis_sync.hset("h", "bad", "{{{")

    records = await kv_store.hash_get_all("h")

    assert records == {"good": {"id": "good"}}


async def test_list_operations(kv_store):
    await kv_store.list_push_head("l", "a")
    await kv_store.list_push_head("l", "b")
    await kv_store.list_push_head("l", "a")
    assert await kv_store.list_range("l") == ["a", "b", "a"]

    assert await kv_store.list_remove("l", "a") == 2
    assert await kv_store.list_range("l") == ["b"]
    assert await kv_store.list_length("l") == 1


async def test_set_if_absent_honours_existing_key(kv_store):
    assert await kv_store.set_if_absent("lock", "one", 30) is True
    assert await kv_store.set_if_absent("lock", "two", 30) is False
    await kv_store.delete("lock")
    assert await kv_store.set_if_absent("lock", "three", 30) is True


async def test_keys_and_exists(kv_store):
    await kv_store.hash_set("clinic:c1:patients", "p1", {"id": "p1"})
    await kv_store.list_push_head("clinic:c1:waiting_room", "p1")
    await kv_store.list_push_head("clinic:c2:waiting_room", "p9")

    assert await kv_store.keys("clinic:c1:*") == ["clinic:c1:patients", "clinic:c1:waiting_room"]
    assert await kv_store.exists("clinic:c2:waiting_room")
    assert not await kv_store.exists("clinic:c3:waiting_room")


async def test_connection_errors_become_store_errors(redis_server):
    redis_server.connected = False
    store = RedisKeyValueStore(fakeredis.aioredis.FakeRedis(server=redis_server, decode_responses=True))

    with pytest.raises(StoreError) as exc_info:
        await store.hash_get_all("clinic:c1:patients")

    assert exc_info.value.error_code == "STORE_ERROR"
    assert exc_info.value.details["command"] == "HGETALL"


async def test_hash_get_all_raw_keeps_every_value(kv_store, redis_sync):
    redis_sync.hset("h", "good", json.dumps({"id": "good"}))
    redis_sync.hset("h", "bad", "{{{")

    raw = await kv_store.hash_get_all_raw("h")

    assert raw == {"good": '{"id": "good"}', "bad": "{{{"}


async def test_delete_if_equals_only_removes_own_value(kv_store, redis_sync):
    redis_sync.set("lock", "mine", ex=30)

    assert await kv_store.delete_if_equals("lock", "theirs") is False
    assert redis_sync.get("lock") == "mine"

    assert await kv_store.delete_if_equals("lock", "mine") is True
    assert not redis_sync.exists("lock")
    assert await kv_store.delete_if_equals("lock", "mine") is False
