"""Repository layer for plan catalog queries."""

import uuid
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from nutritrack.models import Plan


class PlanRepository:
    """Repository for plan database operations."""

    @staticmethod
    async def get_by_id(db: AsyncSession, plan_id: uuid.UUID) -> Optional[Plan]:
        result = await db.execute(select(Plan).where(Plan.id == plan_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_name(db: AsyncSession, name: str) -> Optional[Plan]:
        """Exact, case-sensitive name lookup."""
        result = await db.execute(select(Plan).where(Plan.name == name))
        return result.scalar_one_or_none()

    @staticmethod
    async def list_active(db: AsyncSession) -> Sequence[Plan]:
        result = await db.execute(
            select(Plan).where(Plan.is_active.is_(True)).order_by(Plan.price.asc(), Plan.name.asc())
        )
        return result.scalars().all()

    @staticmethod
    async def list_all(db: AsyncSession) -> Sequence[Plan]:
        result = await db.execute(select(Plan).order_by(Plan.price.asc(), Plan.name.asc()))
        return result.scalars().all()
