"""
Clinic signup, picker and sign-in schemas.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from ...domain.entities.clinic import Clinic


class RegisterClinicRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    address: Optional[str] = Field(None, max_length=250)
    phone: Optional[str] = Field(None, max_length=32)
    email: Optional[str] = Field(None, max_length=120)
    admin_username: str = Field(..., min_length=1, max_length=64)
    admin_password: str = Field(..., min_length=1, max_length=128)


class ClinicSchema(BaseModel):
    """Clinic details without the admin password."""

    id: str
    name: str
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    admin_username: str
    created_at: int = Field(..., description="Epoch milliseconds")

    @classmethod
    def from_entity(cls, clinic: Clinic) -> "ClinicSchema":
        return cls(
            id=clinic.clinic_id.value,
            name=clinic.name,
            address=clinic.address,
            phone=clinic.phone,
            email=clinic.email,
            admin_username=clinic.admin_username,
            created_at=clinic.created_at,
        )


class ClinicOption(BaseModel):
    """Entry in the sign-in clinic picker."""

    id: str
    name: str


class ClinicListResponse(BaseModel):
    count: int
    clinics: List[ClinicSchema]


class LoginRequestSchema(BaseModel):
    clinic_id: Optional[str] = Field(None, description="Clinic to sign in to")
    role: Optional[str] = Field(None, description="'doctor' or 'receptionist'")
    username: str = Field(..., description="Clinic admin username")
    password: str = Field(..., description="Clinic admin password")


class LoginResponse(BaseModel):
    clinic_id: str
    role: str
    redirect_to: str
