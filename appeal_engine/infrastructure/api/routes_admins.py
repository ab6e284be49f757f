"""Admin endpoints — workload dashboard and roster sync."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from appeal_engine.adapters.persistence.database import get_session
from appeal_engine.application.use_cases.admin_directory import AdminDirectoryService
from appeal_engine.application.use_cases.workload_queries import WorkloadQueries
from appeal_engine.domain.entities.admin_workload import AdminWorkload
from appeal_engine.domain.entities.category_expertise import AdminCategoryExpertise
from appeal_engine.domain.errors import UnknownAdminError
from appeal_engine.domain.value_objects.enums import AppealCategory
from appeal_engine.infrastructure.api.dependencies import (
    get_admin_directory,
    get_workload_queries,
)

router = APIRouter(prefix="/admins", tags=["admins"])


class AvailabilityRequest(BaseModel):
    is_available: bool


class ExperienceLevelRequest(BaseModel):
    experience_level: int = Field(ge=1, le=5)


# ── Dashboard (read-only) ───────────────────────────────────────────


@router.get("")
async def list_available_admins(
    category: AppealCategory | None = None,
    queries: WorkloadQueries = Depends(get_workload_queries),
):
    """Admins that can currently receive appeals.

    With ?category= only admins with a record in that category are listed,
    best-ranked first.
    """
    if category is None:
        workloads = await queries.get_available_admins()
        admins = [_workload_to_dict(w) for w in workloads]
    else:
        pairs = await queries.get_available_admins_for_category(category)
        admins = [
            {**_workload_to_dict(w), "experience_level": e.experience_level}
            for w, e in pairs
        ]
    return {"total": len(admins), "admins": admins}


@router.get("/stats")
async def workload_stats(queries: WorkloadQueries = Depends(get_workload_queries)):
    stats = await queries.get_stats()
    return {
        "total_admins": stats.total_admins,
        "available_admins": stats.available_admins,
        "total_active_appeals": stats.total_active_appeals,
        "average_active_per_admin": stats.average_active_per_admin,
        "most_loaded": _workload_to_dict(stats.most_loaded) if stats.most_loaded else None,
        "least_loaded_available": (
            _workload_to_dict(stats.least_loaded_available)
            if stats.least_loaded_available
            else None
        ),
        "stale_admin_ids": stats.stale_admin_ids,
    }


@router.get("/{admin_id}")
async def get_admin_workload(
    admin_id: int,
    queries: WorkloadQueries = Depends(get_workload_queries),
):
    try:
        workload = await queries.get_workload_snapshot(admin_id)
    except UnknownAdminError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _workload_to_dict(workload)


@router.get("/{admin_id}/expertise")
async def get_admin_expertise(
    admin_id: int,
    queries: WorkloadQueries = Depends(get_workload_queries),
):
    try:
        records = await queries.get_admin_expertise(admin_id)
    except UnknownAdminError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"admin_id": admin_id, "expertise": [_expertise_to_dict(e) for e in records]}


# ── Roster sync ─────────────────────────────────────────────────────


@router.post("/{admin_id}")
async def register_admin(
    admin_id: int,
    directory: AdminDirectoryService = Depends(get_admin_directory),
    session: AsyncSession = Depends(get_session),
):
    """Called when a user is promoted to admin. Idempotent."""
    workload = await directory.on_admin_promoted(admin_id)
    await session.commit()
    return _workload_to_dict(workload)


@router.put("/{admin_id}/availability")
async def set_availability(
    admin_id: int,
    body: AvailabilityRequest,
    directory: AdminDirectoryService = Depends(get_admin_directory),
    session: AsyncSession = Depends(get_session),
):
    try:
        workload = await directory.set_availability(admin_id, body.is_available)
    except UnknownAdminError as e:
        raise HTTPException(status_code=404, detail=str(e))
    await session.commit()
    return _workload_to_dict(workload)


@router.put("/{admin_id}/expertise/{category}")
async def set_experience_level(
    admin_id: int,
    category: AppealCategory,
    body: ExperienceLevelRequest,
    directory: AdminDirectoryService = Depends(get_admin_directory),
    session: AsyncSession = Depends(get_session),
):
    try:
        expertise = await directory.set_experience_level(
            admin_id, category, body.experience_level
        )
    except UnknownAdminError as e:
        raise HTTPException(status_code=404, detail=str(e))
    await session.commit()
    return _expertise_to_dict(expertise)


def _workload_to_dict(w: AdminWorkload) -> dict:
    return {
        "admin_id": w.admin_id,
        "active_appeals_count": w.active_appeals_count,
        "total_appeals_count": w.total_appeals_count,
        "is_available": w.is_available,
        "last_activity_at": w.last_activity_at.isoformat() if w.last_activity_at else None,
    }


def _expertise_to_dict(e: AdminCategoryExpertise) -> dict:
    return {
        "admin_id": e.admin_id,
        "category": e.category.value,
        "experience_level": e.experience_level,
        "successful_resolutions": e.successful_resolutions,
        "total_resolutions": e.total_resolutions,
        "success_ratio": round(e.success_ratio, 3),
    }
