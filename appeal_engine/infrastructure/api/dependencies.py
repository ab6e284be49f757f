"""FastAPI dependency injection — wires adapters into use cases."""

from __future__ import annotations

from datetime import timedelta

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from appeal_engine.adapters.persistence.database import get_session
from appeal_engine.adapters.persistence.repositories import (
    SqlExpertiseRepository,
    SqlWorkloadRepository,
)
from appeal_engine.application.use_cases.admin_directory import AdminDirectoryService
from appeal_engine.application.use_cases.assign_appeal import AssignmentCoordinator
from appeal_engine.application.use_cases.maintain_workload import WorkloadMaintainer
from appeal_engine.application.use_cases.workload_queries import WorkloadQueries
from appeal_engine.config import settings

# Re-export session dependency
get_db_session = get_session


def get_workload_repo(session: AsyncSession = Depends(get_session)) -> SqlWorkloadRepository:
    return SqlWorkloadRepository(session)


def get_expertise_repo(session: AsyncSession = Depends(get_session)) -> SqlExpertiseRepository:
    return SqlExpertiseRepository(session)


def build_coordinator(
    workload_repo: SqlWorkloadRepository,
    expertise_repo: SqlExpertiseRepository,
) -> AssignmentCoordinator:
    return AssignmentCoordinator(
        workload_repo,
        expertise_repo,
        claim_timeout=settings.claim_timeout_seconds,
        claim_retry_attempts=settings.claim_retry_attempts,
        retry_backoff=settings.claim_retry_backoff_seconds,
        max_rounds=settings.assignment_max_rounds,
        default_experience_level=settings.default_experience_level,
    )


def get_assignment_coordinator(
    workload_repo: SqlWorkloadRepository = Depends(get_workload_repo),
    expertise_repo: SqlExpertiseRepository = Depends(get_expertise_repo),
) -> AssignmentCoordinator:
    return build_coordinator(workload_repo, expertise_repo)


def get_workload_maintainer(
    workload_repo: SqlWorkloadRepository = Depends(get_workload_repo),
    expertise_repo: SqlExpertiseRepository = Depends(get_expertise_repo),
) -> WorkloadMaintainer:
    return WorkloadMaintainer(
        workload_repo,
        expertise_repo,
        build_coordinator(workload_repo, expertise_repo),
        default_experience_level=settings.default_experience_level,
    )


def get_workload_queries(
    workload_repo: SqlWorkloadRepository = Depends(get_workload_repo),
    expertise_repo: SqlExpertiseRepository = Depends(get_expertise_repo),
) -> WorkloadQueries:
    return WorkloadQueries(
        workload_repo,
        expertise_repo,
        stale_after=timedelta(hours=settings.stale_after_hours),
    )


def get_admin_directory(
    workload_repo: SqlWorkloadRepository = Depends(get_workload_repo),
    expertise_repo: SqlExpertiseRepository = Depends(get_expertise_repo),
) -> AdminDirectoryService:
    return AdminDirectoryService(workload_repo, expertise_repo)
