"""WorkloadMaintainer — keeps counters in step with appeal lifecycle events."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from appeal_engine.application.ports.expertise_repo import ExpertiseRepository
from appeal_engine.application.ports.workload_repo import WorkloadRepository
from appeal_engine.application.use_cases.assign_appeal import (
    AssignmentCoordinator,
    utc_now,
)
from appeal_engine.domain.entities.assignment import AssignmentResult
from appeal_engine.domain.entities.category_expertise import AdminCategoryExpertise
from appeal_engine.domain.errors import UnknownAdminError
from appeal_engine.domain.policies.assignment_ranking import coerce_category
from appeal_engine.domain.policies.experience_level import MIN_EXPERIENCE_LEVEL
from appeal_engine.domain.value_objects.enums import AppealCategory

logger = logging.getLogger(__name__)


class WorkloadMaintainer:
    """Reacts to close / unassign / reassign / escalate of an already assigned appeal.

    Every decrement here pairs with an earlier claim. A decrement that finds
    the counter at zero is an accounting bug elsewhere: it is clamped and
    logged, never raised to the caller.
    """

    def __init__(
        self,
        workload_repo: WorkloadRepository,
        expertise_repo: ExpertiseRepository,
        coordinator: AssignmentCoordinator,
        *,
        default_experience_level: int = MIN_EXPERIENCE_LEVEL,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._workloads = workload_repo
        self._expertise = expertise_repo
        self._coordinator = coordinator
        self._default_level = default_experience_level
        self._now = clock

    async def on_closed(
        self,
        admin_id: int,
        category: AppealCategory | str,
        was_resolution_successful: bool,
    ) -> AdminCategoryExpertise:
        """Release the admin's slot and count the resolution in their expertise record."""
        category = coerce_category(category)
        now = self._now()
        await self._release(admin_id, now, reason="closed")
        expertise = await self._expertise.record_resolution(
            admin_id, category, was_resolution_successful, self._default_level, now
        )
        logger.info(
            "Admin %s closed a %s appeal (successful=%s, %d/%d, level %d)",
            admin_id, category.value, was_resolution_successful,
            expertise.successful_resolutions, expertise.total_resolutions,
            expertise.experience_level,
        )
        return expertise

    async def on_unassigned(self, admin_id: int) -> None:
        """The appeal went back to the unassigned queue; nothing was resolved."""
        await self._release(admin_id, self._now(), reason="unassigned")

    async def on_manual_reassign(
        self,
        ticket_id: int,
        from_admin_id: int,
        to_admin_id: int,
        category: AppealCategory | str | None = None,
    ) -> AssignmentResult:
        """Move an appeal to an admin picked by a human.

        The destination is checked before anything is written, so an unknown
        id leaves the source admin's counters untouched. If the destination
        cannot take the appeal (unavailable, store degraded) the appeal ends
        up unassigned, which the caller must persist.

        Raises:
            UnknownAdminError: if either admin has no workload record.
        """
        if category is not None:
            category = coerce_category(category)
        if from_admin_id == to_admin_id:
            return AssignmentResult.assigned(ticket_id, to_admin_id)
        if await self._workloads.get_by_admin(to_admin_id) is None:
            raise UnknownAdminError(to_admin_id)

        await self._release(from_admin_id, self._now(), reason="reassigned")
        result = await self._coordinator.claim_admin(ticket_id, to_admin_id, category)
        if not result.is_assigned:
            logger.warning(
                "Appeal %s: reassignment %s → %s failed, appeal is now unassigned",
                ticket_id, from_admin_id, to_admin_id,
            )
        return result

    async def on_escalated(
        self,
        ticket_id: int,
        admin_id: int,
        category: AppealCategory | str,
    ) -> AssignmentResult:
        """Take an overdue appeal away from its admin and route it again.

        Another admin is preferred; if nobody else is eligible the appeal may
        land back on the same admin rather than sit unassigned.
        """
        category = coerce_category(category)
        await self._release(admin_id, self._now(), reason="escalated")

        result = await self._coordinator.assign(
            ticket_id, category, exclude_admin_ids={admin_id}
        )
        if not result.is_assigned and not result.degraded:
            logger.info(
                "Appeal %s: no other admin for escalation, retrying without exclusion",
                ticket_id,
            )
            result = await self._coordinator.assign(ticket_id, category)
        return result

    async def _release(self, admin_id: int, at: datetime, reason: str) -> None:
        released = await self._workloads.release(admin_id, at)
        if released:
            logger.info("Admin %s released an appeal slot (%s)", admin_id, reason)
        else:
            logger.error(
                "Accounting inconsistency: admin %s had no active appeals to release (%s); "
                "counter clamped at 0",
                admin_id, reason,
            )
