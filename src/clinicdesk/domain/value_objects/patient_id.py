"""
Patient ID value object for type-safe patient identification.
Format: patient:{EPOCH_MS}-{RANDOM_HEX}
"""

from dataclasses import dataclass

from ...core.utils.string_utils import decode_identifier, generate_id

PATIENT_ID_PREFIX = "patient:"


@dataclass(frozen=True)
class PatientId:
    """Immutable patient identifier value object."""

    value: str

    def __post_init__(self) -> None:
        """Validate patient ID."""
        if not isinstance(self.value, str):
            raise ValueError("Patient ID must be a string")
        if not self.value.strip():
            raise ValueError("Patient ID cannot be empty")

    def __str__(self) -> str:
        """String representation."""
        return self.value

    @classmethod
    def generate(cls) -> "PatientId":
        """Generate a new patient ID."""
        return cls(generate_id(PATIENT_ID_PREFIX))

    @classmethod
    def from_external(cls, raw: str) -> "PatientId":
        """Build an ID from a URL path segment (``patient%3A...`` or ``patient:...``)."""
        return cls(decode_identifier(raw))
