"""
Per-clinic store key names.
"""

import re
from dataclasses import dataclass

from .clinic_id import ClinicId

CLINICS_KEY = "clinics"

# Pre-multi-tenant keys, migrated into the default clinic on startup.
LEGACY_PATIENTS_KEY = "patients"
LEGACY_WAITING_ROOM_KEY = "waiting_room"
LEGACY_DOCTOR_ROOM_KEY = "doctor_room"
LEGACY_KEYS = (LEGACY_PATIENTS_KEY, LEGACY_WAITING_ROOM_KEY, LEGACY_DOCTOR_ROOM_KEY)

_GLOB_SPECIAL = re.compile(r"([\\*?\[\]])")


@dataclass(frozen=True)
class ClinicKeyspace:
    """The three collections that make up one clinic's data."""

    patients: str
    waiting_room: str
    doctor_room: str

    @classmethod
    def for_clinic(cls, clinic_id: ClinicId) -> "ClinicKeyspace":
        """Derive key names. Distinct clinic ids never share a key."""
        base = f"clinic:{clinic_id.value}"
        return cls(
            patients=f"{base}:patients",
            waiting_room=f"{base}:waiting_room",
            doctor_room=f"{base}:doctor_room",
        )

    @property
    def pattern(self) -> str:
        """Glob over this clinic's key prefix, with glob characters in the id escaped.

        A clinic whose id extends this one after a colon shares the prefix,
        so callers filter matches against ``all_keys()``.
        """
        base = self.patients[: -len(":patients")]
        return _GLOB_SPECIAL.sub(r"\\\1", base) + ":*"

    def all_keys(self) -> tuple:
        return (self.patients, self.waiting_room, self.doctor_room)
