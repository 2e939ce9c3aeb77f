"""
Key-value implementation of PatientRepository.

Each clinic owns a patient hash (id -> JSON record) and two room lists of
ids, newest at the head. The hash is authoritative; the lists only order
the queues. Writes are separate store commands with no transaction around
them, so two staff acting on the same patient at once can overwrite each
other (last write wins).
"""

from typing import Any, Dict, List, Optional

from clinicdesk.application.ports.repositories.patient_repo import PatientRepository
from clinicdesk.application.ports.storage.key_value_store import KeyValueStore
from clinicdesk.core.structured_logger import get_logger
from clinicdesk.core.utils.datetime_utils import now_ms
from clinicdesk.domain.entities.patient import MedicalDetails, Patient
from clinicdesk.domain.enums.workflow import STANDARD_TRANSITIONS, PatientStatus
from clinicdesk.domain.errors import InvalidStatusTransitionError, PatientNotFoundError
from clinicdesk.domain.value_objects.clinic_id import ClinicId
from clinicdesk.domain.value_objects.clinic_keyspace import (
    LEGACY_DOCTOR_ROOM_KEY,
    LEGACY_KEYS,
    ClinicKeyspace,
)
from clinicdesk.domain.value_objects.patient_id import PatientId

LOGGER = get_logger("clinicdesk.patients")


def _room_key(keyspace: ClinicKeyspace, status: PatientStatus) -> Optional[str]:
    if status == PatientStatus.WAITING:
        return keyspace.waiting_room
    if status == PatientStatus.WITH_DOCTOR:
        return keyspace.doctor_room
    return None


class KeyValuePatientRepository(PatientRepository):
    """Key-value implementation of PatientRepository."""

    def __init__(self, store: KeyValueStore):
        self._store = store

    async def create(self, patient: Patient) -> Patient:
        """Write the record, then queue it in the room for its status."""
        keyspace = ClinicKeyspace.for_clinic(ClinicId(patient.clinic_id))
        pid = patient.patient_id.value

        await self._store.hash_set(keyspace.patients, pid, patient.to_record())
        room = _room_key(keyspace, patient.status)
        if room:
            await self._store.list_push_head(room, pid)

        LOGGER.info(
            "Patient created",
            clinic_id=patient.clinic_id,
            patient_id=pid,
            status=patient.status.value,
        )
        return patient

    async def get(self, clinic_id: ClinicId, patient_id: PatientId) -> Patient:
        keyspace = ClinicKeyspace.for_clinic(clinic_id)
        record = await self._store.hash_get(keyspace.patients, patient_id.value)
        patient = self._to_entity(record, clinic_id) if record is not None else None
        if patient is None:
            raise PatientNotFoundError(patient_id.value, clinic_id.value)
        return patient

    async def transition_status(
        self, clinic_id: ClinicId, patient_id: PatientId, new_status: PatientStatus
    ) -> Patient:
        """Write the new status, then reconcile room membership."""
        keyspace = ClinicKeyspace.for_clinic(clinic_id)
        patient = await self.get(clinic_id, patient_id)
        old_status = patient.status

        if old_status != new_status and (old_status, new_status) not in STANDARD_TRANSITIONS:
            LOGGER.warning(
                "Non-standard status transition",
                clinic_id=clinic_id.value,
                patient_id=patient_id.value,
                from_status=old_status.value,
                to_status=new_status.value,
            )

        patient.status = new_status
        await self._store.hash_set(keyspace.patients, patient_id.value, patient.to_record())
        await self._sync_rooms(keyspace, patient_id.value, new_status)

        LOGGER.info(
            "Patient status changed",
            clinic_id=clinic_id.value,
            patient_id=patient_id.value,
            from_status=old_status.value,
            to_status=new_status.value,
        )
        return patient

    async def _sync_rooms(self, keyspace: ClinicKeyspace, pid: str, status: PatientStatus) -> None:
        """Leave ``pid`` exactly once in the room for ``status`` and nowhere else."""
        target = _room_key(keyspace, status)
        for room in (keyspace.waiting_room, keyspace.doctor_room):
            if room != target:
                await self._store.list_remove(room, pid)

        if target is None:
            return
        occurrences = (await self._store.list_range(target)).count(pid)
        if occurrences == 1:
            return
        if occurrences > 1:
            await self._store.list_remove(target, pid)
        await self._store.list_push_head(target, pid)

    async def record_medical_details(
        self, clinic_id: ClinicId, patient_id: PatientId, details: MedicalDetails
    ) -> Patient:
        """Overlay non-empty fields on the stored details. Status and rooms are untouched."""
        keyspace = ClinicKeyspace.for_clinic(clinic_id)
        patient = await self.get(clinic_id, patient_id)

        existing = patient.medical_details or MedicalDetails()
        patient.medical_details = existing.merged_with(details, now_ms())
        await self._store.hash_set(keyspace.patients, patient_id.value, patient.to_record())

        LOGGER.info("Medical details recorded", clinic_id=clinic_id.value, patient_id=patient_id.value)
        return patient

    async def delete(self, clinic_id: ClinicId, patient_id: PatientId) -> None:
        """Drop the record and both room entries.

        Dangling room entries are cleaned up even when the record is already
        gone; only an id found nowhere is reported as missing.
        """
        keyspace = ClinicKeyspace.for_clinic(clinic_id)
        pid = patient_id.value

        removed = await self._store.hash_delete(keyspace.patients, pid)
        removed += await self._store.list_remove(keyspace.waiting_room, pid)
        removed += await self._store.list_remove(keyspace.doctor_room, pid)
        if not removed:
            raise PatientNotFoundError(pid, clinic_id.value)

        LOGGER.info("Patient deleted", clinic_id=clinic_id.value, patient_id=pid)

    async def remove_from_queue(self, clinic_id: ClinicId, patient_id: PatientId) -> Patient:
        """Take a waiting or in-consultation patient out of the clinic."""
        patient = await self.get(clinic_id, patient_id)
        if patient.status == PatientStatus.COMPLETED:
            raise InvalidStatusTransitionError(patient_id.value, patient.status.value, "removed")

        keyspace = ClinicKeyspace.for_clinic(clinic_id)
        await self._store.hash_delete(keyspace.patients, patient_id.value)
        await self._store.list_remove(keyspace.waiting_room, patient_id.value)
        await self._store.list_remove(keyspace.doctor_room, patient_id.value)

        LOGGER.info(
            "Patient removed from queue",
            clinic_id=clinic_id.value,
            patient_id=patient_id.value,
            status=patient.status.value,
        )
        return patient

    async def list_waiting(self, clinic_id: ClinicId) -> List[Patient]:
        keyspace = ClinicKeyspace.for_clinic(clinic_id)
        return await self._resolve_room(clinic_id, keyspace, keyspace.waiting_room)

    async def list_with_doctor(self, clinic_id: ClinicId) -> List[Patient]:
        keyspace = ClinicKeyspace.for_clinic(clinic_id)
        return await self._resolve_room(clinic_id, keyspace, keyspace.doctor_room)

    async def _resolve_room(
        self, clinic_id: ClinicId, keyspace: ClinicKeyspace, room: str
    ) -> List[Patient]:
        """Map room ids to records from a single hash read, in list order.

        Ids without a usable record are skipped and logged.
        """
        ids = await self._store.list_range(room)
        if not ids:
            return []
        records = await self._store.hash_get_all(keyspace.patients)

        patients: List[Patient] = []
        seen = set()
        for pid in ids:
            if pid in seen:
                continue
            seen.add(pid)
            record = records.get(pid)
            patient = self._to_entity(record, clinic_id) if record is not None else None
            if patient is None:
                LOGGER.warning(
                    "Room entry has no patient record",
                    clinic_id=clinic_id.value,
                    patient_id=pid,
                    room=room,
                )
                continue
            patients.append(patient)
        return patients

    async def _all_patients(self, clinic_id: ClinicId) -> List[Patient]:
        keyspace = ClinicKeyspace.for_clinic(clinic_id)
        records = await self._store.hash_get_all(keyspace.patients)
        patients = []
        for record in records.values():
            patient = self._to_entity(record, clinic_id)
            if patient is not None:
                patients.append(patient)
        return patients

    async def find_history(self, clinic_id: ClinicId, name: str, phone_number: str) -> List[Patient]:
        """Same name and phone, with medical details, newest first."""
        matches = [
            p
            for p in await self._all_patients(clinic_id)
            if p.name == name and p.phone_number == phone_number and p.has_medical_details()
        ]
        return sorted(matches, key=lambda p: p.last_activity, reverse=True)

    async def list_past_records(self, clinic_id: ClinicId) -> List[Patient]:
        completed = [
            p
            for p in await self._all_patients(clinic_id)
            if p.status == PatientStatus.COMPLETED and p.has_medical_details()
        ]
        return sorted(completed, key=lambda p: p.last_activity, reverse=True)

    async def clear_clinic(self, clinic_id: ClinicId) -> Dict[str, Any]:
        """Delete the clinic's keys and any leftover legacy keys."""
        keyspace = ClinicKeyspace.for_clinic(clinic_id)
        deleted = await self._store.delete(*keyspace.all_keys(), *LEGACY_KEYS)

        remaining = {
            "patients": await self._store.hash_length(keyspace.patients),
            "waiting": await self._store.list_length(keyspace.waiting_room),
            "with_doctor": await self._store.list_length(keyspace.doctor_room),
        }
        LOGGER.warning("Clinic data cleared", clinic_id=clinic_id.value, deleted_keys=deleted, **remaining)
        return {"clinic_id": clinic_id.value, "deleted_keys": deleted, "remaining": remaining}

    async def snapshot(self, clinic_id: ClinicId) -> Dict[str, Any]:
        """Raw view of the clinic's keys for troubleshooting."""
        keyspace = ClinicKeyspace.for_clinic(clinic_id)
        legacy_present = [key for key in LEGACY_KEYS if await self._store.exists(key)]
        own_keys = set(keyspace.all_keys())
        return {
            "clinic_id": clinic_id.value,
            "keys": [key for key in await self._store.keys(keyspace.pattern) if key in own_keys],
            "legacy_keys": legacy_present,
            "patients": await self._store.hash_get_all(keyspace.patients),
            "waiting_room": await self._store.list_range(keyspace.waiting_room),
            "doctor_room": await self._store.list_range(keyspace.doctor_room),
            "legacy_doctor_room": await self._store.list_range(LEGACY_DOCTOR_ROOM_KEY),
        }

    @staticmethod
    def _to_entity(record: Dict[str, Any], clinic_id: ClinicId) -> Optional[Patient]:
        try:
            return Patient.from_record(record, clinic_id.value)
        except (KeyError, TypeError, ValueError) as e:
            LOGGER.warning(
                "Skipping malformed patient record",
                clinic_id=clinic_id.value,
                patient_id=record.get("id"),
                error=str(e),
            )
            return None
