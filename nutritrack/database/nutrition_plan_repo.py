"""Repository layer for nutrition plan queries."""

import uuid
from datetime import date
from typing import Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from nutritrack.models import NutritionPlan


class NutritionPlanRepository:

    @staticmethod
    async def count_for_user(db: AsyncSession, user_id: uuid.UUID) -> int:
        """Count the nutrition plans owned by a user (quota usage)."""
        result = await db.execute(
            select(func.count()).select_from(NutritionPlan).where(NutritionPlan.user_id == user_id)
        )
        return int(result.scalar_one())

    @staticmethod
    async def get_for_user(
        db: AsyncSession, nutrition_plan_id: uuid.UUID, user_id: uuid.UUID
    ) -> Optional[NutritionPlan]:
        result = await db.execute(
            select(NutritionPlan).where(
                NutritionPlan.id == nutrition_plan_id,
                NutritionPlan.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_date(db: AsyncSession, user_id: uuid.UUID, plan_date: date) -> Optional[NutritionPlan]:
        result = await db.execute(
            select(NutritionPlan).where(
                NutritionPlan.user_id == user_id,
                NutritionPlan.plan_date == plan_date,
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def list_for_user(
        db: AsyncSession, user_id: uuid.UUID, offset: int = 0, limit: int = 20
    ) -> Sequence[NutritionPlan]:
        result = await db.execute(
            select(NutritionPlan)
            .where(NutritionPlan.user_id == user_id)
            .order_by(NutritionPlan.plan_date.desc())
            .offset(offset)
            .limit(limit)
        )
        return result.scalars().all()

    @staticmethod
    async def list_between(
        db: AsyncSession, user_id: uuid.UUID, start: date, end: date
    ) -> Sequence[NutritionPlan]:
        """Plans dated within ``[start, end]``, oldest first."""
        result = await db.execute(
            select(NutritionPlan)
            .where(
                NutritionPlan.user_id == user_id,
                NutritionPlan.plan_date >= start,
                NutritionPlan.plan_date <= end,
            )
            .order_by(NutritionPlan.plan_date.asc())
        )
        return result.scalars().all()

    @staticmethod
    async def list_pending(db: AsyncSession, user_id: uuid.UUID, today: date) -> Sequence[NutritionPlan]:
        """Plans that are not completed and dated today or earlier."""
        result = await db.execute(
            select(NutritionPlan)
            .where(
                NutritionPlan.user_id == user_id,
                NutritionPlan.is_completed.is_(False),
                NutritionPlan.plan_date <= today,
            )
            .order_by(NutritionPlan.plan_date.asc())
        )
        return result.scalars().all()

    @staticmethod
    async def list_future(db: AsyncSession, user_id: uuid.UUID, today: date) -> Sequence[NutritionPlan]:
        result = await db.execute(
            select(NutritionPlan)
            .where(NutritionPlan.user_id == user_id, NutritionPlan.plan_date > today)
            .order_by(NutritionPlan.plan_date.asc())
        )
        return result.scalars().all()
