"""
Value objects package for domain layer.
"""

from .clinic_id import ClinicId
from .clinic_keyspace import ClinicKeyspace
from .patient_id import PatientId

__all__ = [
    "ClinicId",
    "ClinicKeyspace",
    "PatientId",
]
