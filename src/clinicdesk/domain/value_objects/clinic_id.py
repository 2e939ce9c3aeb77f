"""
Clinic ID value object.

Registered clinics carry a ``clinic:`` tag; the untagged tokens
``clinic1``..``clinic3`` predate self-service signup.
"""

from dataclasses import dataclass

from ...core.utils.string_utils import decode_identifier, generate_id

CLINIC_ID_PREFIX = "clinic:"


@dataclass(frozen=True)
class ClinicId:
    """Immutable clinic identifier value object."""

    value: str

    def __post_init__(self) -> None:
        """Validate clinic ID."""
        if not isinstance(self.value, str):
            raise ValueError("Clinic ID must be a string")
        if not self.value.strip():
            raise ValueError("Clinic ID cannot be empty")

    def __str__(self) -> str:
        """String representation."""
        return self.value

    @property
    def is_registered(self) -> bool:
        """True for clinics created through signup."""
        return self.value.startswith(CLINIC_ID_PREFIX)

    @classmethod
    def generate(cls) -> "ClinicId":
        """Generate a new registered clinic ID."""
        return cls(generate_id(CLINIC_ID_PREFIX))

    @classmethod
    def from_external(cls, raw: str) -> "ClinicId":
        """Build an ID from a URL path segment or query value."""
        return cls(decode_identifier(raw))
