"""Port interface for admin workload persistence."""

from abc import ABC, abstractmethod
from datetime import datetime

from appeal_engine.domain.entities.admin_workload import AdminWorkload


class WorkloadRepository(ABC):
    @abstractmethod
    async def get_by_admin(self, admin_id: int) -> AdminWorkload | None:
        ...

    @abstractmethod
    async def get_all(self) -> list[AdminWorkload]:
        ...

    @abstractmethod
    async def get_available(self) -> list[AdminWorkload]:
        """Return admins with is_available=True, ordered by admin id."""
        ...

    @abstractmethod
    async def create(self, admin_id: int, at: datetime) -> AdminWorkload:
        """Create the record with zero counters. Returns the existing record if any."""
        ...

    @abstractmethod
    async def try_claim(self, admin_id: int, expected_active: int, at: datetime) -> bool:
        """Atomically take one appeal slot for the admin.

        Increments active and total counters and sets last_activity_at, but
        only if the admin is still available and the active counter still
        equals *expected_active*. Returns False when the condition did not
        hold (nothing is written in that case).
        """
        ...

    @abstractmethod
    async def release(self, admin_id: int, at: datetime) -> bool:
        """Give back one appeal slot and set last_activity_at.

        Returns False when the active counter was already zero (only the
        activity timestamp is written then).

        Raises:
            UnknownAdminError: if the admin has no workload record.
        """
        ...

    @abstractmethod
    async def set_availability(
        self, admin_id: int, is_available: bool, at: datetime
    ) -> AdminWorkload:
        """Raises UnknownAdminError if the admin has no workload record."""
        ...
