"""
API schemas package.
"""

from .clinic import (
    ClinicListResponse,
    ClinicOption,
    ClinicSchema,
    LoginRequestSchema,
    LoginResponse,
    RegisterClinicRequest,
)
from .common import ApiResponse, ErrorResponse
from .patient import (
    CreatePatientRequest,
    MedicalDetailsRequest,
    MedicalDetailsSchema,
    PatientListResponse,
    PatientSchema,
    UpdateStatusRequest,
)
from .transcription import DictationAnalysis, DictationResponse

__all__ = [
    "ApiResponse",
    "ErrorResponse",
    "ClinicListResponse",
    "ClinicOption",
    "ClinicSchema",
    "LoginRequestSchema",
    "LoginResponse",
    "RegisterClinicRequest",
    "CreatePatientRequest",
    "MedicalDetailsRequest",
    "MedicalDetailsSchema",
    "PatientListResponse",
    "PatientSchema",
    "UpdateStatusRequest",
    "DictationAnalysis",
    "DictationResponse",
]
