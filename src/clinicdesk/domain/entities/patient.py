"""Patient domain entity representing one visit in a clinic queue."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ...core.utils.datetime_utils import now_ms
from ..enums.workflow import PatientStatus
from ..errors import InvalidPatientDataError
from ..value_objects.patient_id import PatientId

MEDICAL_FIELDS = ("symptoms", "diagnosis", "prescription", "notes")
PATIENT_RECORD_KEYS = (
    "id",
    "name",
    "phoneNumber",
    "age",
    "gender",
    "status",
    "createdAt",
    "clinicId",
    "medicalDetails",
)
MEDICAL_RECORD_KEYS = MEDICAL_FIELDS + ("updatedAt",)


def _unknown_keys(record: Dict[str, Any], known: tuple) -> Dict[str, Any]:
    """Stored keys this model does not read, kept so rewrites do not drop them."""
    return {key: value for key, value in record.items() if key not in known}


@dataclass
class MedicalDetails:
    """Doctor-authored free text for a visit."""

    symptoms: Optional[str] = None
    diagnosis: Optional[str] = None
    prescription: Optional[str] = None
    notes: Optional[str] = None
    updated_at: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    def merged_with(self, update: "MedicalDetails", updated_at: int) -> "MedicalDetails":
        """Overlay the non-empty fields of ``update`` and stamp the time."""
        merged = MedicalDetails(updated_at=updated_at, extra=dict(self.extra))
        for name in MEDICAL_FIELDS:
            new_value = getattr(update, name)
            setattr(merged, name, new_value if new_value else getattr(self, name))
        return merged

    def to_record(self) -> Dict[str, Any]:
        record: Dict[str, Any] = dict(self.extra)
        record.update({name: getattr(self, name) or "" for name in MEDICAL_FIELDS})
        if self.updated_at is not None:
            record["updatedAt"] = self.updated_at
        return record

    @classmethod
    def from_record(cls, record: Optional[Dict[str, Any]]) -> Optional["MedicalDetails"]:
        if not isinstance(record, dict):
            return None
        updated_at = record.get("updatedAt")
        return cls(
            symptoms=record.get("symptoms") or None,
            diagnosis=record.get("diagnosis") or None,
            prescription=record.get("prescription") or None,
            notes=record.get("notes") or None,
            updated_at=int(updated_at) if isinstance(updated_at, (int, float)) else None,
            extra=_unknown_keys(record, MEDICAL_RECORD_KEYS),
        )


@dataclass
class Patient:
    """Patient domain entity."""

    patient_id: PatientId
    clinic_id: str
    name: str
    phone_number: str
    age: int
    gender: str
    status: PatientStatus = PatientStatus.WAITING
    created_at: int = field(default_factory=now_ms)
    medical_details: Optional[MedicalDetails] = None
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def new(
        cls,
        clinic_id: str,
        name: Any,
        phone_number: Any,
        age: Any,
        gender: Any,
        status: PatientStatus = PatientStatus.WAITING,
    ) -> "Patient":
        """Validate intake fields and build a fresh patient."""
        if not isinstance(clinic_id, str) or not clinic_id.strip():
            raise InvalidPatientDataError("clinic_id", "Clinic ID is required")
        if not isinstance(name, str) or not name.strip():
            raise InvalidPatientDataError("name", "Name is required", name)
        if not isinstance(phone_number, str) or not phone_number.strip():
            raise InvalidPatientDataError("phone_number", "Phone number is required", phone_number)
        if not isinstance(gender, str) or not gender.strip():
            raise InvalidPatientDataError("gender", "Gender is required", gender)

        return cls(
            patient_id=PatientId.generate(),
            clinic_id=clinic_id,
            name=name.strip(),
            phone_number=phone_number.strip(),
            age=_parse_age(age),
            gender=gender.strip(),
            status=PatientStatus(status),
        )

    def to_record(self) -> Dict[str, Any]:
        """Serialize using the stored field names, over any unknown stored keys."""
        record: Dict[str, Any] = dict(self.extra)
        record.update(
            {
                "id": self.patient_id.value,
                "name": self.name,
                "phoneNumber": self.phone_number,
                "age": self.age,
                "gender": self.gender,
                "status": self.status.value,
                "createdAt": self.created_at,
                "clinicId": self.clinic_id,
            }
        )
        if self.medical_details is not None:
            record["medicalDetails"] = self.medical_details.to_record()
        return record

    @classmethod
    def from_record(cls, record: Dict[str, Any], clinic_id: Optional[str] = None) -> "Patient":
        """Rebuild from a stored record. Raises ``KeyError`` or ``ValueError`` on unusable data."""
        try:
            age = int(record.get("age", 0))
        except (TypeError, ValueError):
            age = 0
        return cls(
            patient_id=PatientId(str(record["id"])),
            clinic_id=record.get("clinicId") or clinic_id or "",
            name=str(record.get("name", "")),
            phone_number=str(record.get("phoneNumber", "")),
            age=age,
            gender=str(record.get("gender", "")),
            status=PatientStatus(record.get("status", PatientStatus.WAITING.value)),
            created_at=int(record.get("createdAt") or 0),
            medical_details=MedicalDetails.from_record(record.get("medicalDetails")),
            extra=_unknown_keys(record, PATIENT_RECORD_KEYS),
        )

    def has_medical_details(self) -> bool:
        """True once a details record was saved, even with every field blank."""
        return self.medical_details is not None

    @property
    def last_activity(self) -> int:
        """Ordering key for history: last medical update, else intake time."""
        if self.medical_details is not None and self.medical_details.updated_at:
            return self.medical_details.updated_at
        return self.created_at


def _parse_age(age: Any) -> int:
    """Accept non-negative integers or strings of digits."""
    if isinstance(age, bool):
        raise InvalidPatientDataError("age", "Age must be a non-negative whole number", age)
    if isinstance(age, int):
        value = age
    elif isinstance(age, str) and age.strip().isdigit():
        value = int(age.strip())
    else:
        raise InvalidPatientDataError("age", "Age must be a non-negative whole number", age)
    if value < 0:
        raise InvalidPatientDataError("age", "Age must be a non-negative whole number", age)
    return value
