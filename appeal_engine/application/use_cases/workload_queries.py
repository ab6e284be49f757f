"""WorkloadQueries — read-only views for the admin dashboard."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from appeal_engine.application.ports.expertise_repo import ExpertiseRepository
from appeal_engine.application.ports.workload_repo import WorkloadRepository
from appeal_engine.application.use_cases.assign_appeal import utc_now
from appeal_engine.domain.entities.admin_workload import AdminWorkload
from appeal_engine.domain.entities.category_expertise import AdminCategoryExpertise
from appeal_engine.domain.errors import UnknownAdminError
from appeal_engine.domain.policies.assignment_ranking import (
    build_candidates,
    coerce_category,
    rank_candidates,
)
from appeal_engine.domain.value_objects.enums import AppealCategory


@dataclass
class WorkloadStats:
    """Aggregate picture of the admin pool."""

    total_admins: int
    available_admins: int
    total_active_appeals: int
    average_active_per_admin: float
    most_loaded: AdminWorkload | None = None
    least_loaded_available: AdminWorkload | None = None
    stale_admin_ids: list[int] = field(default_factory=list)


class WorkloadQueries:
    def __init__(
        self,
        workload_repo: WorkloadRepository,
        expertise_repo: ExpertiseRepository,
        *,
        stale_after: timedelta = timedelta(hours=72),
        clock: Callable[[], datetime] = utc_now,
    ):
        self._workloads = workload_repo
        self._expertise = expertise_repo
        self._stale_after = stale_after
        self._now = clock

    async def get_workload_snapshot(self, admin_id: int) -> AdminWorkload:
        workload = await self._workloads.get_by_admin(admin_id)
        if workload is None:
            raise UnknownAdminError(admin_id)
        return workload

    async def get_available_admins(self) -> list[AdminWorkload]:
        return await self._workloads.get_available()

    async def get_available_admins_for_category(
        self, category: AppealCategory | str
    ) -> list[tuple[AdminWorkload, AdminCategoryExpertise]]:
        """Available admins with a record in *category*, best-ranked first."""
        category = coerce_category(category)
        workloads = await self._workloads.get_available()
        records = {e.admin_id: e for e in await self._expertise.get_for_category(category)}
        experts = {w.admin_id: w for w in workloads if w.admin_id in records}
        ranked = rank_candidates(
            category, build_candidates(category, experts.values(), records.values())
        )
        return [(experts[c.admin_id], records[c.admin_id]) for c in ranked]

    async def get_admin_expertise(self, admin_id: int) -> list[AdminCategoryExpertise]:
        if await self._workloads.get_by_admin(admin_id) is None:
            raise UnknownAdminError(admin_id)
        return await self._expertise.get_for_admin(admin_id)

    async def get_stats(self) -> WorkloadStats:
        workloads = await self._workloads.get_all()
        now = self._now()
        available = [w for w in workloads if w.is_available]
        total_active = sum(w.active_appeals_count for w in workloads)

        return WorkloadStats(
            total_admins=len(workloads),
            available_admins=len(available),
            total_active_appeals=total_active,
            average_active_per_admin=(
                round(total_active / len(workloads), 2) if workloads else 0.0
            ),
            most_loaded=max(
                workloads,
                key=lambda w: (w.active_appeals_count, -w.admin_id),
                default=None,
            ),
            least_loaded_available=min(
                available,
                key=lambda w: (w.active_appeals_count, w.admin_id),
                default=None,
            ),
            stale_admin_ids=[
                w.admin_id for w in available if w.is_stale(now, self._stale_after)
            ],
        )
