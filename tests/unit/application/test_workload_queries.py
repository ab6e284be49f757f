"""Tests for WorkloadQueries."""

from __future__ import annotations

from datetime import timedelta

import pytest

from appeal_engine.domain.errors import InvalidCategoryError, UnknownAdminError
from appeal_engine.domain.value_objects.enums import AppealCategory


@pytest.mark.asyncio
async def test_snapshot_returns_copy(queries, workload_repo):
    workload_repo.add(1, active=2)

    snap = await queries.get_workload_snapshot(1)
    snap.active_appeals_count = 50

    assert workload_repo.rows[1].active_appeals_count == 2


@pytest.mark.asyncio
async def test_snapshot_unknown_admin(queries):
    with pytest.raises(UnknownAdminError):
        await queries.get_workload_snapshot(7)


@pytest.mark.asyncio
async def test_available_admins(queries, workload_repo):
    workload_repo.add(2)
    workload_repo.add(1, available=False)
    workload_repo.add(3)

    admins = await queries.get_available_admins()

    assert [a.admin_id for a in admins] == [2, 3]


@pytest.mark.asyncio
async def test_admin_expertise(queries, workload_repo, expertise_repo):
    workload_repo.add(1)
    expertise_repo.add(1, AppealCategory.EVENTS, level=2)
    expertise_repo.add(1, AppealCategory.DORMITORY, level=4)
    expertise_repo.add(2, AppealCategory.EVENTS, level=5)

    records = await queries.get_admin_expertise(1)

    assert {r.category for r in records} == {AppealCategory.EVENTS, AppealCategory.DORMITORY}


@pytest.mark.asyncio
async def test_admin_expertise_unknown_admin(queries):
    with pytest.raises(UnknownAdminError):
        await queries.get_admin_expertise(1)


@pytest.mark.asyncio
async def test_stats_empty_pool(queries):
    stats = await queries.get_stats()

    assert stats.total_admins == 0
    assert stats.average_active_per_admin == 0.0
    assert stats.most_loaded is None
    assert stats.least_loaded_available is None
    assert stats.stale_admin_ids == []


@pytest.mark.asyncio
async def test_stats_aggregates(queries, workload_repo, now):
    workload_repo.add(1, active=4, last_activity_at=now - timedelta(hours=1))
    workload_repo.add(2, active=1, last_activity_at=now - timedelta(days=5))
    workload_repo.add(3, active=0, available=False, last_activity_at=now - timedelta(days=9))
    workload_repo.add(4, active=1, created_at=now - timedelta(days=10))

    stats = await queries.get_stats()

    assert stats.total_admins == 4
    assert stats.available_admins == 3
    assert stats.total_active_appeals == 6
    assert stats.average_active_per_admin == 1.5
    assert stats.most_loaded.admin_id == 1
    assert stats.least_loaded_available.admin_id == 2
    assert stats.stale_admin_ids == [2, 4]


@pytest.mark.asyncio
async def test_available_admins_for_category(queries, workload_repo, expertise_repo):
    workload_repo.add(1, active=0)
    workload_repo.add(2, active=3)
    workload_repo.add(3, available=False)
    workload_repo.add(4)
    expertise_repo.add(1, AppealCategory.SCHOLARSHIP, level=2)
    expertise_repo.add(2, AppealCategory.SCHOLARSHIP, level=4)
    expertise_repo.add(3, AppealCategory.SCHOLARSHIP, level=5)
    expertise_repo.add(4, AppealCategory.EVENTS, level=5)

    pairs = await queries.get_available_admins_for_category("scholarship")

    assert [w.admin_id for w, _ in pairs] == [2, 1]
    assert [e.experience_level for _, e in pairs] == [4, 2]


@pytest.mark.asyncio
async def test_available_admins_for_category_rejects_unknown(queries):
    with pytest.raises(InvalidCategoryError):
        await queries.get_available_admins_for_category("parking")
