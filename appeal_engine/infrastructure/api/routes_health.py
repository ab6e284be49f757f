"""Health check endpoint."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from appeal_engine.adapters.persistence.database import get_session
from appeal_engine.adapters.persistence.models import AdminWorkloadModel

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(session: AsyncSession = Depends(get_session)):
    """Check database connectivity and whether anyone can take appeals.

    An empty admin pool is reported but does not make the service degraded:
    appeals then wait in the manual pickup queue.
    """
    try:
        available = await session.scalar(
            select(func.count())
            .select_from(AdminWorkloadModel)
            .where(AdminWorkloadModel.is_available.is_(True))
        )
    except SQLAlchemyError as e:
        logger.exception("Health check query failed")
        return {
            "status": "degraded",
            "database": f"error: {e.__class__.__name__}",
            "available_admins": None,
            "service": "Appeal Assignment Engine",
        }

    return {
        "status": "ok",
        "database": "connected",
        "available_admins": available or 0,
        "service": "Appeal Assignment Engine",
    }
