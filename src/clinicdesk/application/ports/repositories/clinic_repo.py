"""
Clinic directory interface.
"""

from abc import ABC, abstractmethod
from typing import List

from ....domain.entities.clinic import Clinic
from ....domain.value_objects.clinic_id import ClinicId
from ...dto.clinic_dto import MigrationReport


class ClinicRepository(ABC):
    """Abstract repository for registered clinics."""

    @abstractmethod
    async def register(self, clinic: Clinic) -> Clinic:
        """Store a clinic and prepare its patient keyspace."""
        pass

    @abstractmethod
    async def get_all(self) -> List[Clinic]:
        pass

    @abstractmethod
    async def get_by_id(self, clinic_id: ClinicId) -> Clinic:
        """Find a clinic by ID. Raises ``ClinicNotFoundError``."""
        pass

    @abstractmethod
    async def migrate_legacy_data(self) -> MigrationReport:
        """Move un-prefixed data into the default clinic. Idempotent."""
        pass

    @abstractmethod
    async def wait_for_migration(self, poll_interval: float = 0.5) -> bool:
        """Block until no migration holds the lock. False on timeout."""
        pass
