"""
Visit workflow enums.
"""

from enum import Enum


class PatientStatus(str, Enum):
    """Lifecycle of a patient visit."""

    WAITING = "waiting"
    WITH_DOCTOR = "with-doctor"
    COMPLETED = "completed"


class StaffRole(str, Enum):
    """Roles that can sign in to a clinic."""

    DOCTOR = "doctor"
    RECEPTIONIST = "receptionist"


# Transitions the front desk and doctor screens perform. Anything else is
# still applied but logged as non-standard.
STANDARD_TRANSITIONS = {
    (PatientStatus.WAITING, PatientStatus.WITH_DOCTOR),
    (PatientStatus.WITH_DOCTOR, PatientStatus.COMPLETED),
}
