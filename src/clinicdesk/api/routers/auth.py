"""Staff sign-in endpoint."""

from fastapi import APIRouter, Request

from ...application.dto.clinic_dto import LoginRequest
from ...application.use_cases.authenticate_staff import AuthenticateStaffUseCase
from ...core.exceptions import StoreError
from ...domain.errors import DomainError
from ..deps import ClinicRepositoryDep, SettingsDep
from ..schemas.clinic import LoginRequestSchema, LoginResponse
from ..schemas.common import ApiResponse, ErrorResponse
from ..utils.responses import fail_from_error, ok

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/login",
    response_model=ApiResponse[LoginResponse],
    responses={
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        404: {"model": ErrorResponse, "description": "Clinic not found"},
        422: {"model": ErrorResponse, "description": "Missing role or clinic"},
    },
)
async def login(
    request: Request,
    body: LoginRequestSchema,
    clinic_repo: ClinicRepositoryDep,
    settings: SettingsDep,
):
    """
    Check a doctor or receptionist sign-in.

    Returns the dashboard path the client should open. No session token is
    issued.
    """
    use_case = AuthenticateStaffUseCase(clinic_repo, settings.clinic.legacy_clinics)
    try:
        result = await use_case.execute(
            LoginRequest(
                clinic_id=body.clinic_id,
                role=body.role,
                username=body.username,
                password=body.password,
            )
        )
    except (DomainError, StoreError) as e:
        return fail_from_error(request, e, "login")

    return ok(
        request,
        data=LoginResponse(clinic_id=result.clinic_id, role=result.role, redirect_to=result.redirect_to),
        message="Signed in",
    )
