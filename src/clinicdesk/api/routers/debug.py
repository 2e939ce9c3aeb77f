"""
Debug endpoints for inspecting and resetting clinic data.

Mounted only when debug routes are enabled (development by default).
"""
from dataclasses import asdict

from fastapi import APIRouter, Request

from ...core.exceptions import StoreError
from ...domain.value_objects.clinic_id import ClinicId
from ..deps import ClinicRepositoryDep, PatientRepositoryDep
from ..schemas.clinic import ClinicListResponse, ClinicSchema
from ..schemas.common import ApiResponse
from ..utils.responses import fail_from_error, ok

router = APIRouter(prefix="/debug", tags=["Debug"])


@router.get("/clinics", response_model=ApiResponse[ClinicListResponse])
async def debug_list_clinics(request: Request, clinic_repo: ClinicRepositoryDep):
    """Every registered clinic with all fields except the password."""
    try:
        clinics = await clinic_repo.get_all()
    except StoreError as e:
        return fail_from_error(request, e, "debug_list_clinics")
    return ok(
        request,
        data=ClinicListResponse(count=len(clinics), clinics=[ClinicSchema.from_entity(c) for c in clinics]),
    )


@router.get("/clinics/{clinic_id}", response_model=ApiResponse[dict])
async def debug_clinic_snapshot(
    request: Request,
    clinic_id: str,
    clinic_repo: ClinicRepositoryDep,
    patient_repo: PatientRepositoryDep,
):
    """Migrate any legacy data, then dump the clinic's keys, records and rooms."""
    clinic = ClinicId.from_external(clinic_id)
    try:
        migration = await clinic_repo.migrate_legacy_data()
        snapshot = await patient_repo.snapshot(clinic)
    except StoreError as e:
        return fail_from_error(request, e, "debug_clinic_snapshot")
    snapshot["migration"] = asdict(migration)
    return ok(request, data=snapshot)


@router.delete("/clinics/{clinic_id}", response_model=ApiResponse[dict])
async def debug_clear_clinic(request: Request, clinic_id: str, patient_repo: PatientRepositoryDep):
    """Delete every patient and room entry of a clinic, plus leftover legacy keys."""
    try:
        result = await patient_repo.clear_clinic(ClinicId.from_external(clinic_id))
    except StoreError as e:
        return fail_from_error(request, e, "debug_clear_clinic")
    return ok(request, data=result, message="Clinic data cleared")


@router.post("/migrate", response_model=ApiResponse[dict])
async def debug_migrate(request: Request, clinic_repo: ClinicRepositoryDep):
    """Run the legacy key migration now."""
    try:
        report = await clinic_repo.migrate_legacy_data()
    except StoreError as e:
        return fail_from_error(request, e, "debug_migrate")
    message = "Migration completed" if report.migrated else f"Nothing migrated ({report.skipped_reason})"
    return ok(request, data=asdict(report), message=message)
