"""SQLAlchemy repository implementations."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import (
    DBAPIError,
    InterfaceError,
    OperationalError,
    PendingRollbackError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession

from appeal_engine.adapters.persistence.models import (
    AdminCategoryExpertiseModel,
    AdminWorkloadModel,
)
from appeal_engine.application.ports.expertise_repo import ExpertiseRepository
from appeal_engine.application.ports.workload_repo import WorkloadRepository
from appeal_engine.domain.entities.admin_workload import AdminWorkload
from appeal_engine.domain.entities.category_expertise import AdminCategoryExpertise
from appeal_engine.domain.errors import TransientStoreError, UnknownAdminError
from appeal_engine.domain.value_objects.enums import AppealCategory

# serialization_failure, deadlock_detected, lock_not_available,
# query_canceled (statement_timeout), in_failed_sql_transaction
RETRYABLE_SQLSTATES = frozenset({"40001", "40P01", "55P03", "57014", "25P02"})

# ─── Mappers ─────────────────────────────────────────────────────────


def _workload_to_domain(m: AdminWorkloadModel) -> AdminWorkload:
    return AdminWorkload(
        admin_id=m.admin_id,
        active_appeals_count=m.active_appeals_count,
        total_appeals_count=m.total_appeals_count,
        is_available=m.is_available,
        last_activity_at=m.last_activity_at,
        created_at=m.created_at,
    )


def _expertise_to_domain(m: AdminCategoryExpertiseModel) -> AdminCategoryExpertise:
    return AdminCategoryExpertise(
        admin_id=m.admin_id,
        category=AppealCategory(m.category),
        experience_level=m.experience_level,
        successful_resolutions=m.successful_resolutions,
        total_resolutions=m.total_resolutions,
    )


# ─── Error translation ───────────────────────────────────────────────


def is_retryable(error: DBAPIError) -> bool:
    """True for driver errors that a fresh attempt may not hit again."""
    if error.connection_invalidated:
        return True
    # asyncpg exposes the code as `sqlstate`, psycopg2 as `pgcode`
    code = getattr(error.orig, "sqlstate", None) or getattr(error.orig, "pgcode", None)
    return code in RETRYABLE_SQLSTATES


@contextmanager
def _transient_errors() -> Iterator[None]:
    """Translate retryable store failures into TransientStoreError."""
    try:
        yield
    except (OperationalError, InterfaceError, PoolTimeoutError, PendingRollbackError) as e:
        raise TransientStoreError(str(e)) from e
    except DBAPIError as e:
        if not is_retryable(e):
            raise
        raise TransientStoreError(str(e)) from e


@asynccontextmanager
async def _savepoint(session: AsyncSession) -> AsyncIterator[None]:
    """Run statements inside a SAVEPOINT.

    A failed statement rolls back to the savepoint only, so the request
    transaction stays usable and the caller can retry.
    """
    with _transient_errors():
        async with session.begin_nested():
            yield


# ─── Repositories ────────────────────────────────────────────────────


class SqlWorkloadRepository(WorkloadRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def get_by_admin(self, admin_id: int) -> AdminWorkload | None:
        async with _savepoint(self._s):
            result = await self._s.execute(
                select(AdminWorkloadModel).where(AdminWorkloadModel.admin_id == admin_id)
                .execution_options(populate_existing=True)
            )
            m = result.scalar_one_or_none()
        return _workload_to_domain(m) if m else None

    async def get_all(self) -> list[AdminWorkload]:
        async with _savepoint(self._s):
            result = await self._s.execute(
                select(AdminWorkloadModel).order_by(AdminWorkloadModel.admin_id)
                .execution_options(populate_existing=True)
            )
            return [_workload_to_domain(m) for m in result.scalars()]

    async def get_available(self) -> list[AdminWorkload]:
        async with _savepoint(self._s):
            result = await self._s.execute(
                select(AdminWorkloadModel)
                .where(AdminWorkloadModel.is_available.is_(True))
                .order_by(AdminWorkloadModel.admin_id)
                .execution_options(populate_existing=True)
            )
            return [_workload_to_domain(m) for m in result.scalars()]

    async def create(self, admin_id: int, at: datetime) -> AdminWorkload:
        async with _savepoint(self._s):
            await self._s.execute(
                insert(AdminWorkloadModel)
                .values(
                    admin_id=admin_id,
                    active_appeals_count=0,
                    total_appeals_count=0,
                    is_available=True,
                    created_at=at,
                    updated_at=at,
                )
                .on_conflict_do_nothing(index_elements=["admin_id"])
            )
        return await self._require(admin_id)

    async def try_claim(self, admin_id: int, expected_active: int, at: datetime) -> bool:
        # Single conditional UPDATE: the WHERE clause is the compare, the SET the swap
        async with _savepoint(self._s):
            result = await self._s.execute(
                update(AdminWorkloadModel)
                .where(
                    AdminWorkloadModel.admin_id == admin_id,
                    AdminWorkloadModel.is_available.is_(True),
                    AdminWorkloadModel.active_appeals_count == expected_active,
                )
                .values(
                    active_appeals_count=AdminWorkloadModel.active_appeals_count + 1,
                    total_appeals_count=AdminWorkloadModel.total_appeals_count + 1,
                    last_activity_at=at,
                    updated_at=at,
                )
                .execution_options(synchronize_session=False)
            )
        return result.rowcount == 1

    async def release(self, admin_id: int, at: datetime) -> bool:
        async with _savepoint(self._s):
            result = await self._s.execute(
                update(AdminWorkloadModel)
                .where(
                    AdminWorkloadModel.admin_id == admin_id,
                    AdminWorkloadModel.active_appeals_count > 0,
                )
                .values(
                    active_appeals_count=AdminWorkloadModel.active_appeals_count - 1,
                    last_activity_at=at,
                    updated_at=at,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 1:
                return True

            # Counter already at zero (or no such admin): touch only
            touched = await self._s.execute(
                update(AdminWorkloadModel)
                .where(AdminWorkloadModel.admin_id == admin_id)
                .values(last_activity_at=at, updated_at=at)
                .execution_options(synchronize_session=False)
            )
        if touched.rowcount == 0:
            raise UnknownAdminError(admin_id)
        return False

    async def set_availability(
        self, admin_id: int, is_available: bool, at: datetime
    ) -> AdminWorkload:
        async with _savepoint(self._s):
            result = await self._s.execute(
                update(AdminWorkloadModel)
                .where(AdminWorkloadModel.admin_id == admin_id)
                .values(is_available=is_available, last_activity_at=at, updated_at=at)
                .execution_options(synchronize_session=False)
            )
        if result.rowcount == 0:
            raise UnknownAdminError(admin_id)
        return await self._require(admin_id)

    async def _require(self, admin_id: int) -> AdminWorkload:
        workload = await self.get_by_admin(admin_id)
        if workload is None:
            raise UnknownAdminError(admin_id)
        return workload


class SqlExpertiseRepository(ExpertiseRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def get(
        self, admin_id: int, category: AppealCategory
    ) -> AdminCategoryExpertise | None:
        async with _savepoint(self._s):
            m = await self._get_model(admin_id, category)
        return _expertise_to_domain(m) if m else None

    async def get_for_admin(self, admin_id: int) -> list[AdminCategoryExpertise]:
        async with _savepoint(self._s):
            result = await self._s.execute(
                select(AdminCategoryExpertiseModel)
                .where(AdminCategoryExpertiseModel.admin_id == admin_id)
                .order_by(AdminCategoryExpertiseModel.category)
                .execution_options(populate_existing=True)
            )
            return [_expertise_to_domain(m) for m in result.scalars()]

    async def get_for_category(
        self, category: AppealCategory
    ) -> list[AdminCategoryExpertise]:
        async with _savepoint(self._s):
            result = await self._s.execute(
                select(AdminCategoryExpertiseModel)
                .where(AdminCategoryExpertiseModel.category == category.value)
                .order_by(AdminCategoryExpertiseModel.admin_id)
                .execution_options(populate_existing=True)
            )
            return [_expertise_to_domain(m) for m in result.scalars()]

    async def ensure(
        self,
        admin_id: int,
        category: AppealCategory,
        default_level: int,
        at: datetime,
    ) -> AdminCategoryExpertise:
        async with _savepoint(self._s):
            await self._insert_if_missing(admin_id, category, default_level, at)
            m = await self._get_model(admin_id, category)
        return _expertise_to_domain(m)

    async def record_resolution(
        self,
        admin_id: int,
        category: AppealCategory,
        successful: bool,
        default_level: int,
        at: datetime,
    ) -> AdminCategoryExpertise:
        async with _savepoint(self._s):
            await self._insert_if_missing(admin_id, category, default_level, at)
            m = await self._get_model(admin_id, category, for_update=True)
            expertise = _expertise_to_domain(m)
            expertise.record_resolution(successful)
            self._apply(m, expertise, at)
            await self._s.flush()
        return expertise

    async def set_level(
        self,
        admin_id: int,
        category: AppealCategory,
        level: int,
        at: datetime,
    ) -> AdminCategoryExpertise:
        async with _savepoint(self._s):
            await self._insert_if_missing(admin_id, category, level, at)
            m = await self._get_model(admin_id, category, for_update=True)
            expertise = _expertise_to_domain(m)
            expertise.set_experience_level(level)
            self._apply(m, expertise, at)
            await self._s.flush()
        return expertise

    async def _get_model(
        self,
        admin_id: int,
        category: AppealCategory,
        for_update: bool = False,
    ) -> AdminCategoryExpertiseModel | None:
        stmt = select(AdminCategoryExpertiseModel).where(
            AdminCategoryExpertiseModel.admin_id == admin_id,
            AdminCategoryExpertiseModel.category == category.value,
        ).execution_options(populate_existing=True)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self._s.execute(stmt)
        return result.scalar_one_or_none()

    async def _insert_if_missing(
        self,
        admin_id: int,
        category: AppealCategory,
        level: int,
        at: datetime,
    ) -> None:
        await self._s.execute(
            insert(AdminCategoryExpertiseModel)
            .values(
                admin_id=admin_id,
                category=category.value,
                experience_level=level,
                successful_resolutions=0,
                total_resolutions=0,
                created_at=at,
                updated_at=at,
            )
            .on_conflict_do_nothing(index_elements=["admin_id", "category"])
        )

    @staticmethod
    def _apply(
        m: AdminCategoryExpertiseModel,
        expertise: AdminCategoryExpertise,
        at: datetime,
    ) -> None:
        m.experience_level = expertise.experience_level
        m.successful_resolutions = expertise.successful_resolutions
        m.total_resolutions = expertise.total_resolutions
        m.updated_at = at
