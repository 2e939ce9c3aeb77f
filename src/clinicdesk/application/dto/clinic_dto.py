"""Clinic and sign-in DTOs for API communication."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class LoginRequest:
    """Request DTO for staff sign-in."""

    clinic_id: Optional[str]
    role: Optional[str]
    username: str
    password: str


@dataclass
class AuthResult:
    """Successful sign-in: where the client should go next."""

    clinic_id: str
    role: str
    redirect_to: str


@dataclass
class MigrationReport:
    """Outcome of one legacy-data migration attempt."""

    migrated: bool
    target_clinic_id: str
    skipped_reason: Optional[str] = None
    patients_copied: int = 0
    waiting_copied: int = 0
    doctor_copied: int = 0
    legacy_keys_deleted: int = 0
