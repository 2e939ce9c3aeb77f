"""
Clinic registry and legacy key migration tests.
"""

import asyncio
import json

import pytest

from clinicdesk.adapters.db.kv.clinic_repository import MIGRATION_LOCK_KEY, KeyValueClinicRepository
from clinicdesk.domain.entities.clinic import Clinic
from clinicdesk.domain.errors import ClinicNotFoundError, InvalidClinicDataError
from clinicdesk.domain.value_objects import ClinicId


async def test_register_stores_clinic_record(clinic_repo, redis_sync):
    clinic = Clinic.new(name="Acme", admin_username="doc", admin_password="pw123", phone="555-1000")

    await clinic_repo.register(clinic)

    stored = json.loads(redis_sync.hget("clinics", clinic.clinic_id.value))
    assert stored["name"] == "Acme"
    assert stored["adminUsername"] == "doc"
    # Stored in clear text.
    assert stored["adminPassword"] == "pw123"
    assert stored["phone"] == "555-1000"
    assert stored["address"] == ""
    # Probe field is removed again, so the patient hash is not left behind.
    assert not redis_sync.exists(f"clinic:{clinic.clinic_id.value}:patients")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"name": "", "admin_username": "doc", "admin_password": "pw"},
        {"name": "Acme", "admin_username": " ", "admin_password": "pw"},
        {"name": "Acme", "admin_username": "doc", "admin_password": ""},
    ],
)
def test_clinic_requires_name_and_credentials(kwargs):
    with pytest.raises(InvalidClinicDataError):
        Clinic.new(**kwargs)


def test_credentials_compared_exactly():
    clinic = Clinic.new(name="Acme", admin_username="doc", admin_password="pw123")
    assert clinic.check_credentials("doc", "pw123")
    assert not clinic.check_credentials("doc", "PW123")


async def test_get_all_sorted_by_creation(clinic_repo):
    later = Clinic.new(name="Later", admin_username="a", admin_password="b")
    earlier = Clinic.new(name="Earlier", admin_username="a", admin_password="b")
    later.created_at, earlier.created_at = 2_000, 1_000
    await clinic_repo.register(later)
    await clinic_repo.register(earlier)

    clinics = await clinic_repo.get_all()

    assert [c.name for c in clinics] == ["Earlier", "Later"]


async def test_get_by_id(clinic_repo):
    clinic = await clinic_repo.register(Clinic.new(name="Acme", admin_username="doc", admin_password="pw"))

    found = await clinic_repo.get_by_id(clinic.clinic_id)

    assert found.name == "Acme"
    with pytest.raises(ClinicNotFoundError):
        await clinic_repo.get_by_id(ClinicId("clinic:0-missing"))


def _seed_legacy(redis_sync):
    for pid, status in [("patient:1-a", "waiting"), ("patient:2-b", "waiting"), ("patient:3-c", "with-doctor")]:
        record = {"id": pid, "name": pid, "phoneNumber": "555", "age": 40, "gender": "M", "status": status, "createdAt": 1}
        redis_sync.hset("patients", pid, json.dumps(record))
    # Head is newest: b then a.
    redis_sync.lpush("waiting_room", "patient:1-a", "patient:2-b")
    redis_sync.lpush("doctor_room", "patient:3-c")


async def test_migration_moves_legacy_data_into_default_clinic(clinic_repo, redis_sync):
    _seed_legacy(redis_sync)

    report = await clinic_repo.migrate_legacy_data()

    assert report.migrated
    assert report.target_clinic_id == "clinic1"
    assert (report.patients_copied, report.waiting_copied, report.doctor_copied) == (3, 2, 1)
    assert report.legacy_keys_deleted == 3
    assert redis_sync.lrange("clinic:clinic1:waiting_room", 0, -1) == ["patient:2-b", "patient:1-a"]
    assert redis_sync.lrange("clinic:clinic1:doctor_room", 0, -1) == ["patient:3-c"]
    record = json.loads(redis_sync.hget("clinic:clinic1:patients", "patient:1-a"))
    assert record["clinicId"] == "clinic1"
    for key in ("patients", "waiting_room", "doctor_room", MIGRATION_LOCK_KEY):
        assert not redis_sync.exists(key)


async def test_migration_is_a_no_op_the_second_time(clinic_repo, redis_sync):
    _seed_legacy(redis_sync)
    await clinic_repo.migrate_legacy_data()

    report = await clinic_repo.migrate_legacy_data()

    assert not report.migrated
    assert report.skipped_reason == "no_legacy_data"
    assert redis_sync.llen("clinic:clinic1:waiting_room") == 2


async def test_migration_keeps_existing_clinic_entries(clinic_repo, redis_sync):
    _seed_legacy(redis_sync)
    redis_sync.lpush("clinic:clinic1:waiting_room", "patient:0-existing", "patient:2-b")

    await clinic_repo.migrate_legacy_data()

    assert redis_sync.lrange("clinic:clinic1:waiting_room", 0, -1) == [
        "patient:2-b",
        "patient:1-a",
        "patient:0-existing",
    ]


async def test_migration_skipped_while_locked(clinic_repo, redis_sync):
    _seed_legacy(redis_sync)
    redis_sync.set(MIGRATION_LOCK_KEY, "other-worker", ex=30)

    report = await clinic_repo.migrate_legacy_data()

    assert not report.migrated
    assert report.skipped_reason == "locked"
    assert redis_sync.exists("patients")
    assert redis_sync.get(MIGRATION_LOCK_KEY) == "other-worker"


async def test_migration_with_nothing_to_do(clinic_repo, redis_sync):
    report = await clinic_repo.migrate_legacy_data()
    assert report.skipped_reason == "no_legacy_data"
    assert not redis_sync.exists(MIGRATION_LOCK_KEY)


async def test_migration_copies_undecodable_rows_unchanged(clinic_repo, redis_sync):
    _seed_legacy(redis_sync)
    redis_sync.hset("patients", "patient:4-d", "not-json-legacy-value")

    report = await clinic_repo.migrate_legacy_data()

    assert report.patients_copied == 4
    assert redis_sync.hget("clinic:clinic1:patients", "patient:4-d") == "not-json-legacy-value"
    assert not redis_sync.exists("patients")


async def test_migration_leaves_a_lock_taken_over_by_another_worker(clinic_repo, redis_sync):
    _seed_legacy(redis_sync)
    prepend = clinic_repo._prepend_in_order

    async def slow_prepend(room, ids):
        # Our lock expired and another worker acquired it meanwhile.
        redis_sync.set(MIGRATION_LOCK_KEY, "other-worker", ex=30)
        await prepend(room, ids)

    clinic_repo._prepend_in_order = slow_prepend

    report = await clinic_repo.migrate_legacy_data()

    assert report.migrated
    assert redis_sync.get(MIGRATION_LOCK_KEY) == "other-worker"


async def test_wait_for_migration_returns_once_lock_released(clinic_repo, redis_sync):
    redis_sync.set(MIGRATION_LOCK_KEY, "other-worker", ex=30)

    async def finish_elsewhere():
        await asyncio.sleep(0.05)
        redis_sync.delete(MIGRATION_LOCK_KEY)

    task = asyncio.create_task(finish_elsewhere())
    assert await clinic_repo.wait_for_migration(poll_interval=0.01) is True
    await task


async def test_wait_for_migration_gives_up_after_lock_ttl(kv_store, redis_sync):
    repo = KeyValueClinicRepository(kv_store, migration_lock_ttl_seconds=1)
    redis_sync.set(MIGRATION_LOCK_KEY, "stuck-worker", ex=30)

    assert await repo.wait_for_migration(poll_interval=0.05) is False
    assert redis_sync.get(MIGRATION_LOCK_KEY) == "stuck-worker"


async def test_wait_for_migration_without_lock(clinic_repo):
    assert await clinic_repo.wait_for_migration() is True
