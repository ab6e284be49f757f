"""AdminDirectoryService — mirrors admin roster changes into the workload store."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from appeal_engine.application.ports.expertise_repo import ExpertiseRepository
from appeal_engine.application.ports.workload_repo import WorkloadRepository
from appeal_engine.application.use_cases.assign_appeal import utc_now
from appeal_engine.domain.entities.admin_workload import AdminWorkload
from appeal_engine.domain.entities.category_expertise import (
    AdminCategoryExpertise,
    validate_experience_level,
)
from appeal_engine.domain.errors import UnknownAdminError
from appeal_engine.domain.policies.assignment_ranking import coerce_category
from appeal_engine.domain.value_objects.enums import AppealCategory

logger = logging.getLogger(__name__)


class AdminDirectoryService:
    """Identity lives elsewhere; this only keeps workload and expertise rows in sync."""

    def __init__(
        self,
        workload_repo: WorkloadRepository,
        expertise_repo: ExpertiseRepository,
        *,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._workloads = workload_repo
        self._expertise = expertise_repo
        self._now = clock

    async def on_admin_promoted(self, admin_id: int) -> AdminWorkload:
        """Create the workload record for a new admin. Safe to call again."""
        workload = await self._workloads.create(admin_id, self._now())
        logger.info("Admin %s registered (available=%s)", admin_id, workload.is_available)
        return workload

    async def set_availability(self, admin_id: int, is_available: bool) -> AdminWorkload:
        workload = await self._workloads.set_availability(admin_id, is_available, self._now())
        logger.info("Admin %s availability → %s", admin_id, is_available)
        return workload

    async def set_experience_level(
        self,
        admin_id: int,
        category: AppealCategory | str,
        level: int,
    ) -> AdminCategoryExpertise:
        """Manually set an admin's level in a category (1–5), creating the record if needed.

        Raises:
            UnknownAdminError: if the admin has no workload record.
            ValueError: if *level* is out of range.
        """
        category = coerce_category(category)
        validate_experience_level(level)
        if await self._workloads.get_by_admin(admin_id) is None:
            raise UnknownAdminError(admin_id)
        expertise = await self._expertise.set_level(admin_id, category, level, self._now())
        logger.info("Admin %s expertise in %s set to %d", admin_id, category.value, level)
        return expertise
