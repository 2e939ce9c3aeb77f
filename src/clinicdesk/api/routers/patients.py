"""Patient queue endpoints, scoped to one clinic.

Receptionists add patients to the waiting room; doctors move them into
consultation, record medical details and complete the visit.
"""

from fastapi import APIRouter, Query, Request, status

from ...core.exceptions import StoreError
from ...domain.entities.patient import MedicalDetails, Patient
from ...domain.enums.workflow import PatientStatus
from ...domain.errors import DomainError
from ...domain.value_objects.clinic_id import ClinicId
from ...domain.value_objects.patient_id import PatientId
from ..deps import PatientRepositoryDep
from ..schemas.common import ApiResponse, ErrorResponse
from ..schemas.patient import (
    CreatePatientRequest,
    MedicalDetailsRequest,
    PatientListResponse,
    PatientSchema,
    UpdateStatusRequest,
)
from ..utils.responses import fail_from_error, ok

router = APIRouter(prefix="/clinics/{clinic_id}/patients", tags=["Patient Queue"])

ERROR_RESPONSES = {
    404: {"model": ErrorResponse, "description": "Patient not found"},
    422: {"model": ErrorResponse, "description": "Invalid input"},
    503: {"model": ErrorResponse, "description": "Store unavailable"},
}


@router.post(
    "",
    response_model=ApiResponse[PatientSchema],
    status_code=status.HTTP_201_CREATED,
    summary="Add a patient to the clinic",
    responses=ERROR_RESPONSES,
)
async def create_patient(
    request: Request,
    clinic_id: str,
    body: CreatePatientRequest,
    patient_repo: PatientRepositoryDep,
):
    """
    Register a patient visit.

    Receptionists add to the waiting room (default status). Doctors may add
    a walk-in straight into consultation with status ``with-doctor``.
    """
    try:
        patient = Patient.new(
            clinic_id=ClinicId.from_external(clinic_id).value,
            name=body.name,
            phone_number=body.phone_number,
            age=body.age,
            gender=body.gender,
            status=body.status,
        )
        patient = await patient_repo.create(patient)
    except (DomainError, StoreError) as e:
        return fail_from_error(request, e, "create_patient")
    return ok(request, data=PatientSchema.from_entity(patient), message="Patient added")


@router.get("/waiting", response_model=ApiResponse[PatientListResponse], responses=ERROR_RESPONSES)
async def list_waiting(request: Request, clinic_id: str, patient_repo: PatientRepositoryDep):
    """Waiting room, most recently added first."""
    clinic = ClinicId.from_external(clinic_id)
    try:
        patients = await patient_repo.list_waiting(clinic)
    except StoreError as e:
        return fail_from_error(request, e, "list_waiting")
    return ok(request, data=PatientListResponse.build(clinic.value, patients))


@router.get("/with-doctor", response_model=ApiResponse[PatientListResponse], responses=ERROR_RESPONSES)
async def list_with_doctor(request: Request, clinic_id: str, patient_repo: PatientRepositoryDep):
    """Patients currently in consultation, most recently moved first."""
    clinic = ClinicId.from_external(clinic_id)
    try:
        patients = await patient_repo.list_with_doctor(clinic)
    except StoreError as e:
        return fail_from_error(request, e, "list_with_doctor")
    return ok(request, data=PatientListResponse.build(clinic.value, patients))


@router.get("/history", response_model=ApiResponse[PatientListResponse], responses=ERROR_RESPONSES)
async def patient_history(
    request: Request,
    clinic_id: str,
    patient_repo: PatientRepositoryDep,
    name: str = Query(..., min_length=1),
    phone: str = Query(..., min_length=1),
):
    """Earlier visits of the same name and phone that carry medical details, newest first."""
    clinic = ClinicId.from_external(clinic_id)
    try:
        patients = await patient_repo.find_history(clinic, name, phone)
    except StoreError as e:
        return fail_from_error(request, e, "patient_history")
    return ok(request, data=PatientListResponse.build(clinic.value, patients))


@router.get("/past-records", response_model=ApiResponse[PatientListResponse], responses=ERROR_RESPONSES)
async def past_records(request: Request, clinic_id: str, patient_repo: PatientRepositoryDep):
    """Completed visits with medical details, most recently updated first."""
    clinic = ClinicId.from_external(clinic_id)
    try:
        patients = await patient_repo.list_past_records(clinic)
    except StoreError as e:
        return fail_from_error(request, e, "past_records")
    return ok(request, data=PatientListResponse.build(clinic.value, patients))


@router.get("/{patient_id}", response_model=ApiResponse[PatientSchema], responses=ERROR_RESPONSES)
async def get_patient(request: Request, clinic_id: str, patient_id: str, patient_repo: PatientRepositoryDep):
    try:
        patient = await patient_repo.get(ClinicId.from_external(clinic_id), PatientId.from_external(patient_id))
    except (DomainError, StoreError) as e:
        return fail_from_error(request, e, "get_patient")
    return ok(request, data=PatientSchema.from_entity(patient))


async def _transition(
    request: Request,
    clinic_id: str,
    patient_id: str,
    new_status: PatientStatus,
    patient_repo,
    operation: str,
):
    try:
        patient = await patient_repo.transition_status(
            ClinicId.from_external(clinic_id),
            PatientId.from_external(patient_id),
            new_status,
        )
    except (DomainError, StoreError) as e:
        return fail_from_error(request, e, operation)
    return ok(request, data=PatientSchema.from_entity(patient), message=f"Status set to {new_status.value}")


@router.post(
    "/{patient_id}/move-to-doctor",
    response_model=ApiResponse[PatientSchema],
    responses=ERROR_RESPONSES,
)
async def move_to_doctor(request: Request, clinic_id: str, patient_id: str, patient_repo: PatientRepositoryDep):
    """Call a waiting patient into consultation."""
    return await _transition(
        request, clinic_id, patient_id, PatientStatus.WITH_DOCTOR, patient_repo, "move_to_doctor"
    )


@router.post(
    "/{patient_id}/complete",
    response_model=ApiResponse[PatientSchema],
    responses=ERROR_RESPONSES,
)
async def complete_visit(request: Request, clinic_id: str, patient_id: str, patient_repo: PatientRepositoryDep):
    """Finish a consultation."""
    return await _transition(
        request, clinic_id, patient_id, PatientStatus.COMPLETED, patient_repo, "complete_visit"
    )


@router.patch(
    "/{patient_id}/status",
    response_model=ApiResponse[PatientSchema],
    responses=ERROR_RESPONSES,
)
async def update_status(
    request: Request,
    clinic_id: str,
    patient_id: str,
    body: UpdateStatusRequest,
    patient_repo: PatientRepositoryDep,
):
    """Set any status. Moves outside the normal flow are applied and logged."""
    return await _transition(request, clinic_id, patient_id, body.status, patient_repo, "update_status")


@router.put(
    "/{patient_id}/medical-details",
    response_model=ApiResponse[PatientSchema],
    responses=ERROR_RESPONSES,
)
async def record_medical_details(
    request: Request,
    clinic_id: str,
    patient_id: str,
    body: MedicalDetailsRequest,
    patient_repo: PatientRepositoryDep,
):
    """Merge symptoms, diagnosis, prescription and notes into the visit."""
    details = MedicalDetails(
        symptoms=body.symptoms,
        diagnosis=body.diagnosis,
        prescription=body.prescription,
        notes=body.notes,
    )
    try:
        patient = await patient_repo.record_medical_details(
            ClinicId.from_external(clinic_id), PatientId.from_external(patient_id), details
        )
    except (DomainError, StoreError) as e:
        return fail_from_error(request, e, "record_medical_details")
    return ok(request, data=PatientSchema.from_entity(patient), message="Medical details saved")


@router.delete("/{patient_id}", response_model=ApiResponse[dict], responses=ERROR_RESPONSES)
async def delete_patient(request: Request, clinic_id: str, patient_id: str, patient_repo: PatientRepositoryDep):
    """Delete a patient record in any status."""
    pid = PatientId.from_external(patient_id)
    try:
        await patient_repo.delete(ClinicId.from_external(clinic_id), pid)
    except (DomainError, StoreError) as e:
        return fail_from_error(request, e, "delete_patient")
    return ok(request, data={"id": pid.value, "deleted": True}, message="Patient deleted")


@router.delete("/{patient_id}/queue", response_model=ApiResponse[PatientSchema], responses=ERROR_RESPONSES)
async def remove_from_queue(request: Request, clinic_id: str, patient_id: str, patient_repo: PatientRepositoryDep):
    """Remove a waiting or in-consultation patient. Completed visits are kept."""
    try:
        patient = await patient_repo.remove_from_queue(
            ClinicId.from_external(clinic_id), PatientId.from_external(patient_id)
        )
    except (DomainError, StoreError) as e:
        return fail_from_error(request, e, "remove_from_queue")
    return ok(request, data=PatientSchema.from_entity(patient), message="Patient removed from queue")
