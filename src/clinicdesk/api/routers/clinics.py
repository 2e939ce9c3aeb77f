"""Clinic signup and directory endpoints."""

from typing import List

from fastapi import APIRouter, Request, status

from ...core.exceptions import StoreError
from ...domain.entities.clinic import Clinic
from ...domain.errors import DomainError
from ...domain.value_objects.clinic_id import ClinicId
from ..deps import ClinicRepositoryDep, SettingsDep
from ..schemas.clinic import ClinicOption, ClinicSchema, RegisterClinicRequest
from ..schemas.common import ApiResponse, ErrorResponse
from ..utils.responses import fail_from_error, ok

router = APIRouter(prefix="/clinics", tags=["Clinics"])


@router.post(
    "",
    response_model=ApiResponse[ClinicSchema],
    status_code=status.HTTP_201_CREATED,
    summary="Register a new clinic",
    responses={
        422: {"model": ErrorResponse, "description": "Invalid input"},
        503: {"model": ErrorResponse, "description": "Store unavailable"},
    },
)
async def register_clinic(
    request: Request,
    body: RegisterClinicRequest,
    clinic_repo: ClinicRepositoryDep,
):
    """Create a clinic with its admin credential and an empty patient keyspace."""
    try:
        clinic = Clinic.new(
            name=body.name,
            admin_username=body.admin_username,
            admin_password=body.admin_password,
            address=body.address,
            phone=body.phone,
            email=body.email,
        )
        clinic = await clinic_repo.register(clinic)
    except (DomainError, StoreError) as e:
        return fail_from_error(request, e, "register_clinic")
    return ok(request, data=ClinicSchema.from_entity(clinic), message="Clinic registered")


@router.get(
    "",
    response_model=ApiResponse[List[ClinicOption]],
    summary="Clinics offered on the sign-in screen",
)
async def list_clinic_options(
    request: Request,
    clinic_repo: ClinicRepositoryDep,
    settings: SettingsDep,
):
    """
    Id and name of every registered clinic.

    Falls back to the built-in legacy clinics while nothing is registered.
    """
    try:
        clinics = await clinic_repo.get_all()
    except StoreError as e:
        return fail_from_error(request, e, "list_clinic_options")

    if clinics:
        options = [ClinicOption(id=c.clinic_id.value, name=c.name) for c in clinics]
    else:
        options = [
            ClinicOption(id=clinic_id, name=entry["name"])
            for clinic_id, entry in settings.clinic.legacy_clinics.items()
        ]
    return ok(request, data=options)


@router.get(
    "/{clinic_id}",
    response_model=ApiResponse[ClinicSchema],
    responses={404: {"model": ErrorResponse, "description": "Clinic not found"}},
)
async def get_clinic(request: Request, clinic_id: str, clinic_repo: ClinicRepositoryDep):
    """Registered clinic details, password excluded."""
    try:
        clinic = await clinic_repo.get_by_id(ClinicId.from_external(clinic_id))
    except (DomainError, StoreError) as e:
        return fail_from_error(request, e, "get_clinic")
    return ok(request, data=ClinicSchema.from_entity(clinic))
