"""
Key-value implementation of ClinicRepository.
"""

import asyncio
import secrets
import time
from typing import List

from clinicdesk.adapters.storage.redis_store import decode_record
from clinicdesk.application.dto.clinic_dto import MigrationReport
from clinicdesk.application.ports.repositories.clinic_repo import ClinicRepository
from clinicdesk.application.ports.storage.key_value_store import KeyValueStore
from clinicdesk.core.structured_logger import get_logger
from clinicdesk.domain.entities.clinic import Clinic
from clinicdesk.domain.errors import ClinicNotFoundError
from clinicdesk.domain.value_objects.clinic_id import ClinicId
from clinicdesk.domain.value_objects.clinic_keyspace import (
    CLINICS_KEY,
    LEGACY_DOCTOR_ROOM_KEY,
    LEGACY_KEYS,
    LEGACY_PATIENTS_KEY,
    LEGACY_WAITING_ROOM_KEY,
    ClinicKeyspace,
)

LOGGER = get_logger("clinicdesk.clinics")

MIGRATION_LOCK_KEY = "clinicdesk:migration:legacy_keys"
KEYSPACE_PROBE_FIELD = "init"


class KeyValueClinicRepository(ClinicRepository):
    """Key-value implementation of ClinicRepository."""

    def __init__(
        self,
        store: KeyValueStore,
        default_clinic_id: str = "clinic1",
        migration_lock_ttl_seconds: int = 60,
    ):
        self._store = store
        self._default_clinic_id = ClinicId(default_clinic_id)
        self._lock_ttl = migration_lock_ttl_seconds

    async def register(self, clinic: Clinic) -> Clinic:
        """Store the clinic, then probe its patient hash with a throwaway field."""
        await self._store.hash_set(CLINICS_KEY, clinic.clinic_id.value, clinic.to_record())

        # An empty hash cannot exist in the store; reads of a missing hash
        # already come back empty, so the probe only proves the key is writable.
        keyspace = ClinicKeyspace.for_clinic(clinic.clinic_id)
        await self._store.hash_set(keyspace.patients, KEYSPACE_PROBE_FIELD, {"temp": True})
        await self._store.hash_delete(keyspace.patients, KEYSPACE_PROBE_FIELD)

        LOGGER.info("Clinic registered", clinic_id=clinic.clinic_id.value, name=clinic.name)
        return clinic

    async def get_all(self) -> List[Clinic]:
        records = await self._store.hash_get_all(CLINICS_KEY)
        clinics = []
        for field, record in records.items():
            try:
                clinics.append(Clinic.from_record(record))
            except (KeyError, TypeError, ValueError) as e:
                LOGGER.warning("Skipping malformed clinic record", clinic_id=field, error=str(e))
        return sorted(clinics, key=lambda c: c.created_at)

    async def get_by_id(self, clinic_id: ClinicId) -> Clinic:
        record = await self._store.hash_get(CLINICS_KEY, clinic_id.value)
        if record is None:
            raise ClinicNotFoundError(clinic_id.value)
        try:
            return Clinic.from_record(record)
        except (KeyError, TypeError, ValueError) as e:
            LOGGER.warning("Malformed clinic record", clinic_id=clinic_id.value, error=str(e))
            raise ClinicNotFoundError(clinic_id.value) from e

    async def migrate_legacy_data(self) -> MigrationReport:
        """Copy un-prefixed keys into the default clinic and delete them.

        Guarded by a lock key with an expiry so concurrent workers starting
        together do not copy the same data twice. Room order is preserved.
        Patient values are copied as stored text; only records that decode
        get a ``clinicId`` stamped on them.
        """
        target = self._default_clinic_id
        token = secrets.token_hex(8)
        if not await self._store.set_if_absent(MIGRATION_LOCK_KEY, token, self._lock_ttl):
            LOGGER.info("Legacy migration already running elsewhere", clinic_id=target.value)
            return MigrationReport(migrated=False, target_clinic_id=target.value, skipped_reason="locked")

        try:
            legacy_patients = await self._store.hash_get_all_raw(LEGACY_PATIENTS_KEY)
            legacy_waiting = await self._store.list_range(LEGACY_WAITING_ROOM_KEY)
            legacy_doctor = await self._store.list_range(LEGACY_DOCTOR_ROOM_KEY)

            if not (legacy_patients or legacy_waiting or legacy_doctor):
                return MigrationReport(
                    migrated=False, target_clinic_id=target.value, skipped_reason="no_legacy_data"
                )

            keyspace = ClinicKeyspace.for_clinic(target)
            for pid, raw in legacy_patients.items():
                record = decode_record(raw)
                if record is None:
                    LOGGER.warning("Copying undecodable legacy record unchanged", patient_id=pid)
                    await self._store.hash_set(keyspace.patients, pid, raw)
                    continue
                record.setdefault("clinicId", target.value)
                await self._store.hash_set(keyspace.patients, pid, record)

            await self._prepend_in_order(keyspace.waiting_room, legacy_waiting)
            await self._prepend_in_order(keyspace.doctor_room, legacy_doctor)

            deleted = await self._store.delete(*LEGACY_KEYS)
            report = MigrationReport(
                migrated=True,
                target_clinic_id=target.value,
                patients_copied=len(legacy_patients),
                waiting_copied=len(legacy_waiting),
                doctor_copied=len(legacy_doctor),
                legacy_keys_deleted=deleted,
            )
            LOGGER.info(
                "Legacy data migrated",
                clinic_id=target.value,
                patients=report.patients_copied,
                waiting=report.waiting_copied,
                with_doctor=report.doctor_copied,
            )
            return report
        finally:
            if not await self._store.delete_if_equals(MIGRATION_LOCK_KEY, token):
                LOGGER.warning("Migration lock expired and was taken by another worker", clinic_id=target.value)

    async def wait_for_migration(self, poll_interval: float = 0.5) -> bool:
        """Wait while another worker holds the migration lock.

        Returns False if the lock is still held after its expiry time.
        """
        deadline = time.monotonic() + self._lock_ttl
        while await self._store.exists(MIGRATION_LOCK_KEY):
            if time.monotonic() >= deadline:
                LOGGER.warning("Gave up waiting for legacy migration", timeout_seconds=self._lock_ttl)
                return False
            await asyncio.sleep(poll_interval)
        return True

    async def _prepend_in_order(self, room: str, ids: List[str]) -> None:
        """Put ``ids`` at the head of ``room`` keeping their relative order."""
        for pid in reversed(ids):
            await self._store.list_remove(room, pid)
            await self._store.list_push_head(room, pid)
