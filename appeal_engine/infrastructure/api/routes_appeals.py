"""Appeal lifecycle endpoints — called by the appeal workflow at each transition."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from appeal_engine.adapters.persistence.database import get_session
from appeal_engine.application.use_cases.assign_appeal import AssignmentCoordinator
from appeal_engine.application.use_cases.maintain_workload import WorkloadMaintainer
from appeal_engine.domain.entities.assignment import AssignmentResult
from appeal_engine.domain.errors import UnknownAdminError
from appeal_engine.domain.value_objects.enums import AppealCategory, ResolutionOutcome
from appeal_engine.infrastructure.api.dependencies import (
    get_assignment_coordinator,
    get_workload_maintainer,
)

router = APIRouter(prefix="/appeals", tags=["appeals"])

# ── Request schemas ─────────────────────────────────────────────────


class AssignRequest(BaseModel):
    category: AppealCategory


class CloseRequest(BaseModel):
    admin_id: int
    category: AppealCategory
    outcome: ResolutionOutcome


class UnassignRequest(BaseModel):
    admin_id: int


class ReassignRequest(BaseModel):
    from_admin_id: int
    to_admin_id: int
    category: AppealCategory | None = None


class EscalateRequest(BaseModel):
    admin_id: int
    category: AppealCategory


# ── Endpoints ───────────────────────────────────────────────────────


@router.post("/{ticket_id}/assign")
async def assign_appeal(
    ticket_id: int,
    body: AssignRequest,
    coordinator: AssignmentCoordinator = Depends(get_assignment_coordinator),
    session: AsyncSession = Depends(get_session),
):
    """Pick and claim an admin for a new or reopened appeal.

    Always answers 200: an unassigned appeal is a valid state the caller
    keeps in the manual pickup queue.
    """
    result = await coordinator.assign(ticket_id, body.category)
    await session.commit()
    return _result_to_dict(result)


@router.post("/{ticket_id}/close")
async def close_appeal(
    ticket_id: int,
    body: CloseRequest,
    maintainer: WorkloadMaintainer = Depends(get_workload_maintainer),
    session: AsyncSession = Depends(get_session),
):
    try:
        expertise = await maintainer.on_closed(
            body.admin_id, body.category, body.outcome.is_successful
        )
    except UnknownAdminError as e:
        raise HTTPException(status_code=404, detail=str(e))
    await session.commit()
    return {
        "status": "ok",
        "ticket_id": ticket_id,
        "admin_id": body.admin_id,
        "category": body.category.value,
        "experience_level": expertise.experience_level,
        "successful_resolutions": expertise.successful_resolutions,
        "total_resolutions": expertise.total_resolutions,
    }


@router.post("/{ticket_id}/unassign")
async def unassign_appeal(
    ticket_id: int,
    body: UnassignRequest,
    maintainer: WorkloadMaintainer = Depends(get_workload_maintainer),
    session: AsyncSession = Depends(get_session),
):
    try:
        await maintainer.on_unassigned(body.admin_id)
    except UnknownAdminError as e:
        raise HTTPException(status_code=404, detail=str(e))
    await session.commit()
    return {"status": "ok", "ticket_id": ticket_id, "admin_id": body.admin_id}


@router.post("/{ticket_id}/reassign")
async def reassign_appeal(
    ticket_id: int,
    body: ReassignRequest,
    maintainer: WorkloadMaintainer = Depends(get_workload_maintainer),
    session: AsyncSession = Depends(get_session),
):
    try:
        result = await maintainer.on_manual_reassign(
            ticket_id, body.from_admin_id, body.to_admin_id, body.category
        )
    except UnknownAdminError as e:
        raise HTTPException(status_code=404, detail=str(e))
    await session.commit()
    return _result_to_dict(result)


@router.post("/{ticket_id}/escalate")
async def escalate_appeal(
    ticket_id: int,
    body: EscalateRequest,
    maintainer: WorkloadMaintainer = Depends(get_workload_maintainer),
    session: AsyncSession = Depends(get_session),
):
    try:
        result = await maintainer.on_escalated(ticket_id, body.admin_id, body.category)
    except UnknownAdminError as e:
        raise HTTPException(status_code=404, detail=str(e))
    await session.commit()
    return _result_to_dict(result)


def _result_to_dict(r: AssignmentResult) -> dict:
    return {
        "ticket_id": r.ticket_id,
        "outcome": r.outcome.value,
        "admin_id": r.admin_id,
        "degraded": r.degraded,
    }
