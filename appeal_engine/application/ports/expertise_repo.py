"""Port interface for admin category expertise persistence."""

from abc import ABC, abstractmethod
from datetime import datetime

from appeal_engine.domain.entities.category_expertise import AdminCategoryExpertise
from appeal_engine.domain.value_objects.enums import AppealCategory


class ExpertiseRepository(ABC):
    @abstractmethod
    async def get(
        self, admin_id: int, category: AppealCategory
    ) -> AdminCategoryExpertise | None:
        ...

    @abstractmethod
    async def get_for_admin(self, admin_id: int) -> list[AdminCategoryExpertise]:
        ...

    @abstractmethod
    async def get_for_category(
        self, category: AppealCategory
    ) -> list[AdminCategoryExpertise]:
        ...

    @abstractmethod
    async def ensure(
        self,
        admin_id: int,
        category: AppealCategory,
        default_level: int,
        at: datetime,
    ) -> AdminCategoryExpertise:
        """Return the record, creating a zeroed one at *default_level* if missing."""
        ...

    @abstractmethod
    async def record_resolution(
        self,
        admin_id: int,
        category: AppealCategory,
        successful: bool,
        default_level: int,
        at: datetime,
    ) -> AdminCategoryExpertise:
        """Count one resolution (creating the record lazily). Must be atomic per row."""
        ...

    @abstractmethod
    async def set_level(
        self,
        admin_id: int,
        category: AppealCategory,
        level: int,
        at: datetime,
    ) -> AdminCategoryExpertise:
        ...
