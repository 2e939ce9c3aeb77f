"""
Patient queue request/response schemas.
"""

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...domain.entities.patient import Patient
from ...domain.enums.workflow import PatientStatus


class CreatePatientRequest(BaseModel):
    """Front-desk (or doctor) intake form."""

    name: str = Field(..., min_length=1, max_length=120, description="Patient full name")
    phone_number: str = Field(..., min_length=1, max_length=32, description="Contact phone number")
    age: Union[int, str] = Field(..., description="Age in whole years")
    gender: str = Field(..., min_length=1, max_length=32, description="Gender as entered")
    status: PatientStatus = Field(
        PatientStatus.WAITING, description="Initial status; doctors may add straight to consultation"
    )

    @field_validator("status")
    @classmethod
    def validate_initial_status(cls, v: PatientStatus) -> PatientStatus:
        if v == PatientStatus.COMPLETED:
            raise ValueError("New patients start as 'waiting' or 'with-doctor'")
        return v


class UpdateStatusRequest(BaseModel):
    status: PatientStatus


class MedicalDetailsRequest(BaseModel):
    """Partial update; empty or missing fields keep their stored value."""

    symptoms: Optional[str] = Field(None, max_length=5000)
    diagnosis: Optional[str] = Field(None, max_length=5000)
    prescription: Optional[str] = Field(None, max_length=5000)
    notes: Optional[str] = Field(None, max_length=10000)


class MedicalDetailsSchema(BaseModel):
    symptoms: Optional[str] = None
    diagnosis: Optional[str] = None
    prescription: Optional[str] = None
    notes: Optional[str] = None
    updated_at: Optional[int] = Field(None, description="Epoch milliseconds")


class PatientSchema(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    id: str
    clinic_id: str
    name: str
    phone_number: str
    age: int
    gender: str
    status: PatientStatus
    created_at: int = Field(..., description="Epoch milliseconds")
    medical_details: Optional[MedicalDetailsSchema] = None

    @classmethod
    def from_entity(cls, patient: Patient) -> "PatientSchema":
        details = patient.medical_details
        return cls(
            id=patient.patient_id.value,
            clinic_id=patient.clinic_id,
            name=patient.name,
            phone_number=patient.phone_number,
            age=patient.age,
            gender=patient.gender,
            status=patient.status,
            created_at=patient.created_at,
            medical_details=MedicalDetailsSchema(
                symptoms=details.symptoms,
                diagnosis=details.diagnosis,
                prescription=details.prescription,
                notes=details.notes,
                updated_at=details.updated_at,
            )
            if details is not None
            else None,
        )


class PatientListResponse(BaseModel):
    clinic_id: str
    count: int
    patients: List[PatientSchema]

    @classmethod
    def build(cls, clinic_id: str, patients: List[Patient]) -> "PatientListResponse":
        return cls(
            clinic_id=clinic_id,
            count=len(patients),
            patients=[PatientSchema.from_entity(p) for p in patients],
        )
