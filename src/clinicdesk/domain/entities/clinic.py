"""Clinic domain entity: a tenant with its admin credential."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ...core.utils.datetime_utils import now_ms
from ..errors import InvalidClinicDataError
from ..value_objects.clinic_id import ClinicId


@dataclass
class Clinic:
    """Clinic domain entity.

    ``admin_password`` is kept and compared as clear text; the stored record
    format has no hash field.
    """

    clinic_id: ClinicId
    name: str
    admin_username: str
    admin_password: str
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    created_at: int = field(default_factory=now_ms)

    @classmethod
    def new(
        cls,
        name: Any,
        admin_username: Any,
        admin_password: Any,
        address: Optional[str] = None,
        phone: Optional[str] = None,
        email: Optional[str] = None,
    ) -> "Clinic":
        """Validate signup fields and build a clinic with a fresh id."""
        if not isinstance(name, str) or not name.strip():
            raise InvalidClinicDataError("name", "Clinic name is required")
        if not isinstance(admin_username, str) or not admin_username.strip():
            raise InvalidClinicDataError("admin_username", "Admin username is required")
        if not isinstance(admin_password, str) or not admin_password:
            raise InvalidClinicDataError("admin_password", "Admin password is required")

        return cls(
            clinic_id=ClinicId.generate(),
            name=name.strip(),
            admin_username=admin_username.strip(),
            admin_password=admin_password,
            address=address or None,
            phone=phone or None,
            email=email or None,
        )

    def check_credentials(self, username: str, password: str) -> bool:
        return self.admin_username == username and self.admin_password == password

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.clinic_id.value,
            "name": self.name,
            "address": self.address or "",
            "phone": self.phone or "",
            "email": self.email or "",
            "createdAt": self.created_at,
            "adminUsername": self.admin_username,
            "adminPassword": self.admin_password,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Clinic":
        return cls(
            clinic_id=ClinicId(str(record["id"])),
            name=str(record.get("name", "")),
            admin_username=str(record.get("adminUsername", "")),
            admin_password=str(record.get("adminPassword", "")),
            address=record.get("address") or None,
            phone=record.get("phone") or None,
            email=record.get("email") or None,
            created_at=int(record.get("createdAt") or 0),
        )
