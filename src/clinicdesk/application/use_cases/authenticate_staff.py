"""Staff sign-in use case.

Doctor and receptionist share the clinic's single admin credential.
Credentials are compared as clear text.
"""

from typing import Dict

from ...domain.enums.workflow import StaffRole
from ...domain.errors import (
    ClinicNotFoundError,
    InvalidCredentialsError,
    InvalidClinicDataError,
)
from ...domain.value_objects.clinic_id import ClinicId
from ...core.structured_logger import get_logger
from ..dto.clinic_dto import AuthResult, LoginRequest
from ..ports.repositories.clinic_repo import ClinicRepository

LOGGER = get_logger("clinicdesk.auth")

DASHBOARDS = {
    StaffRole.DOCTOR: "/doctor-dashboard",
    StaffRole.RECEPTIONIST: "/receptionist-dashboard",
}


class AuthenticateStaffUseCase:
    """Use case for checking a sign-in attempt against a clinic."""

    def __init__(self, clinic_repository: ClinicRepository, legacy_clinics: Dict[str, Dict[str, str]]):
        self._clinic_repository = clinic_repository
        self._legacy_clinics = legacy_clinics

    async def execute(self, request: LoginRequest) -> AuthResult:
        """Execute the sign-in check and return the dashboard to open."""
        try:
            role = StaffRole(request.role)
        except ValueError:
            raise InvalidClinicDataError("role", "Please select a valid role")

        if not request.clinic_id:
            raise InvalidClinicDataError("clinic_id", "Please select a clinic")
        clinic_id = ClinicId(request.clinic_id)

        if clinic_id.is_registered:
            clinic = await self._clinic_repository.get_by_id(clinic_id)
            accepted = clinic.check_credentials(request.username, request.password)
        else:
            legacy = self._legacy_clinics.get(clinic_id.value)
            if legacy is None:
                raise ClinicNotFoundError(clinic_id.value)
            accepted = legacy["username"] == request.username and legacy["password"] == request.password

        if not accepted:
            LOGGER.warning("Sign-in rejected", clinic_id=clinic_id.value, role=role.value)
            raise InvalidCredentialsError()

        LOGGER.info("Sign-in accepted", clinic_id=clinic_id.value, role=role.value)
        return AuthResult(
            clinic_id=clinic_id.value,
            role=role.value,
            redirect_to=f"{DASHBOARDS[role]}?clinic={clinic_id.value}",
        )
