"""
Patient repository interface for the per-clinic queue.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List

from ....domain.entities.patient import MedicalDetails, Patient
from ....domain.enums.workflow import PatientStatus
from ....domain.value_objects.clinic_id import ClinicId
from ....domain.value_objects.patient_id import PatientId


class PatientRepository(ABC):
    """Abstract repository for patient records and room lists."""

    @abstractmethod
    async def create(self, patient: Patient) -> Patient:
        """Persist a new patient and queue it by its status."""
        pass

    @abstractmethod
    async def get(self, clinic_id: ClinicId, patient_id: PatientId) -> Patient:
        """Find a patient by ID. Raises ``PatientNotFoundError``."""
        pass

    @abstractmethod
    async def transition_status(
        self, clinic_id: ClinicId, patient_id: PatientId, new_status: PatientStatus
    ) -> Patient:
        """Change status and move the patient between room lists."""
        pass

    @abstractmethod
    async def record_medical_details(
        self, clinic_id: ClinicId, patient_id: PatientId, details: MedicalDetails
    ) -> Patient:
        """Merge doctor notes into the patient record."""
        pass

    @abstractmethod
    async def delete(self, clinic_id: ClinicId, patient_id: PatientId) -> None:
        """Delete a patient and drop it from both room lists."""
        pass

    @abstractmethod
    async def remove_from_queue(self, clinic_id: ClinicId, patient_id: PatientId) -> Patient:
        """Remove a waiting or in-consultation patient from the clinic."""
        pass

    @abstractmethod
    async def list_waiting(self, clinic_id: ClinicId) -> List[Patient]:
        pass

    @abstractmethod
    async def list_with_doctor(self, clinic_id: ClinicId) -> List[Patient]:
        pass

    @abstractmethod
    async def find_history(self, clinic_id: ClinicId, name: str, phone_number: str) -> List[Patient]:
        """Previous visits of the same person that carry medical details."""
        pass

    @abstractmethod
    async def list_past_records(self, clinic_id: ClinicId) -> List[Patient]:
        """Completed visits with medical details."""
        pass

    @abstractmethod
    async def clear_clinic(self, clinic_id: ClinicId) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def snapshot(self, clinic_id: ClinicId) -> Dict[str, Any]:
        pass
