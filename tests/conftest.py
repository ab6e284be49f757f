"""Pytest configuration, in-memory store fakes and shared fixtures."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import datetime, timezone

import pytest

from appeal_engine.application.ports.expertise_repo import ExpertiseRepository
from appeal_engine.application.ports.workload_repo import WorkloadRepository
from appeal_engine.application.use_cases.admin_directory import AdminDirectoryService
from appeal_engine.application.use_cases.assign_appeal import AssignmentCoordinator
from appeal_engine.application.use_cases.maintain_workload import WorkloadMaintainer
from appeal_engine.application.use_cases.workload_queries import WorkloadQueries
from appeal_engine.domain.entities.admin_workload import AdminWorkload
from appeal_engine.domain.entities.category_expertise import AdminCategoryExpertise
from appeal_engine.domain.errors import TransientStoreError, UnknownAdminError
from appeal_engine.domain.value_objects.enums import AppealCategory

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)

# ─── In-memory fakes ────────────────────────────────────────────────


class InMemoryWorkloadRepository(WorkloadRepository):
    """Dict-backed store. Reads yield to the loop so concurrent calls interleave.

    Knobs for failure tests:
      fail_reads       number of upcoming reads that raise TransientStoreError
      fail_claims      admin id → number of upcoming claims that raise
      hang_claims      admin ids whose claims never return
    """

    def __init__(self):
        self.rows: dict[int, AdminWorkload] = {}
        self.mutations = 0
        self.claim_calls: list[int] = []
        self.fail_reads = 0
        self.fail_claims: dict[int, int] = {}
        self.hang_claims: set[int] = set()

    def add(
        self,
        admin_id: int,
        active: int = 0,
        total: int | None = None,
        available: bool = True,
        last_activity_at: datetime | None = None,
        created_at: datetime | None = NOW,
    ) -> AdminWorkload:
        """Seed a row without counting it as a mutation."""
        self.rows[admin_id] = AdminWorkload(
            admin_id=admin_id,
            active_appeals_count=active,
            total_appeals_count=active if total is None else total,
            is_available=available,
            last_activity_at=last_activity_at,
            created_at=created_at,
        )
        return self.rows[admin_id]

    async def _read(self):
        await asyncio.sleep(0)
        if self.fail_reads > 0:
            self.fail_reads -= 1
            raise TransientStoreError("connection reset")

    async def get_by_admin(self, admin_id):
        await self._read()
        row = self.rows.get(admin_id)
        return replace(row) if row else None

    async def get_all(self):
        await self._read()
        return [replace(r) for _, r in sorted(self.rows.items())]

    async def get_available(self):
        await self._read()
        return [replace(r) for _, r in sorted(self.rows.items()) if r.is_available]

    async def create(self, admin_id, at):
        if admin_id not in self.rows:
            self.mutations += 1
            self.rows[admin_id] = AdminWorkload(admin_id=admin_id, created_at=at)
        return replace(self.rows[admin_id])

    async def try_claim(self, admin_id, expected_active, at):
        self.claim_calls.append(admin_id)
        if admin_id in self.hang_claims:
            await asyncio.Event().wait()
        if self.fail_claims.get(admin_id, 0) > 0:
            self.fail_claims[admin_id] -= 1
            raise TransientStoreError("deadlock detected")
        # Check and write with no await in between: atomic on the event loop
        row = self.rows.get(admin_id)
        if row is None or not row.is_available or row.active_appeals_count != expected_active:
            return False
        row.active_appeals_count += 1
        row.total_appeals_count += 1
        row.last_activity_at = at
        self.mutations += 1
        return True

    async def release(self, admin_id, at):
        row = self.rows.get(admin_id)
        if row is None:
            raise UnknownAdminError(admin_id)
        self.mutations += 1
        row.last_activity_at = at
        if row.active_appeals_count == 0:
            return False
        row.active_appeals_count -= 1
        return True

    async def set_availability(self, admin_id, is_available, at):
        row = self.rows.get(admin_id)
        if row is None:
            raise UnknownAdminError(admin_id)
        self.mutations += 1
        row.is_available = is_available
        row.last_activity_at = at
        return replace(row)


class InMemoryExpertiseRepository(ExpertiseRepository):
    def __init__(self):
        self.rows: dict[tuple[int, AppealCategory], AdminCategoryExpertise] = {}
        self.mutations = 0
        self.fail_ensure = 0

    def add(
        self,
        admin_id: int,
        category: AppealCategory,
        level: int = 1,
        successful: int = 0,
        total: int = 0,
    ) -> AdminCategoryExpertise:
        self.rows[(admin_id, category)] = AdminCategoryExpertise(
            admin_id=admin_id,
            category=category,
            experience_level=level,
            successful_resolutions=successful,
            total_resolutions=total,
        )
        return self.rows[(admin_id, category)]

    async def get(self, admin_id, category):
        await asyncio.sleep(0)
        row = self.rows.get((admin_id, category))
        return replace(row) if row else None

    async def get_for_admin(self, admin_id):
        await asyncio.sleep(0)
        return [replace(r) for (a, _), r in self.rows.items() if a == admin_id]

    async def get_for_category(self, category):
        await asyncio.sleep(0)
        return [replace(r) for (_, c), r in self.rows.items() if c == category]

    def _get_or_create(self, admin_id, category, default_level):
        key = (admin_id, category)
        if key not in self.rows:
            self.mutations += 1
            self.rows[key] = AdminCategoryExpertise(
                admin_id=admin_id, category=category, experience_level=default_level
            )
        return self.rows[key]

    async def ensure(self, admin_id, category, default_level, at):
        if self.fail_ensure > 0:
            self.fail_ensure -= 1
            raise TransientStoreError("connection reset")
        return replace(self._get_or_create(admin_id, category, default_level))

    async def record_resolution(self, admin_id, category, successful, default_level, at):
        row = self._get_or_create(admin_id, category, default_level)
        row.record_resolution(successful)
        self.mutations += 1
        return replace(row)

    async def set_level(self, admin_id, category, level, at):
        row = self._get_or_create(admin_id, category, level)
        row.set_experience_level(level)
        self.mutations += 1
        return replace(row)


# ─── Fixtures ───────────────────────────────────────────────────────


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def workload_repo():
    return InMemoryWorkloadRepository()


@pytest.fixture
def expertise_repo():
    return InMemoryExpertiseRepository()


@pytest.fixture
def coordinator(workload_repo, expertise_repo):
    return AssignmentCoordinator(
        workload_repo,
        expertise_repo,
        claim_timeout=0.05,
        claim_retry_attempts=3,
        retry_backoff=0,
        clock=lambda: NOW,
    )


@pytest.fixture
def maintainer(workload_repo, expertise_repo, coordinator):
    return WorkloadMaintainer(workload_repo, expertise_repo, coordinator, clock=lambda: NOW)


@pytest.fixture
def queries(workload_repo, expertise_repo):
    return WorkloadQueries(workload_repo, expertise_repo, clock=lambda: NOW)


@pytest.fixture
def directory(workload_repo, expertise_repo):
    return AdminDirectoryService(workload_repo, expertise_repo, clock=lambda: NOW)
