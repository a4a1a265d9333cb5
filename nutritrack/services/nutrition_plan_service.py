"""Service layer for nutrition plan management."""

import logging
import uuid
from datetime import date, timedelta
from typing import Sequence, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from nutritrack.database.nutrition_plan_repo import NutritionPlanRepository
from nutritrack.models import NutritionPlan
from nutritrack.models.models import utcnow
from nutritrack.schemas.nutrition_plans import (
    NutritionPlanCreateRequest,
    NutritionPlanResponse,
    NutritionPlanUpdateRequest,
    WeeklyNutritionPlans,
    WeeklyStats,
)
from nutritrack.services.entitlement_service import EntitlementService
from nutritrack.utils.exceptions import DuplicatePlanDateException, NotFoundException, ValidationException

logger = logging.getLogger(__name__)


def _weekly_stats(plans: Sequence[NutritionPlan]) -> WeeklyStats:
    completed = sum(1 for p in plans if p.is_completed)
    calories = [p.total_calories for p in plans if p.total_calories is not None]
    water_ml = sum(p.water_intake_ml for p in plans if p.water_intake_ml is not None)
    return WeeklyStats(
        total_plans=len(plans),
        completed_plans=completed,
        pending_plans=len(plans) - completed,
        completion_rate=completed / len(plans) * 100 if plans else 0.0,
        average_calories=sum(calories) / len(calories) if calories else 0.0,
        total_water_intake_liters=water_ml / 1000.0,
    )


class NutritionPlanService:
    """Nutrition plans of a single user, with quota enforcement on creation."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, user_id: uuid.UUID, payload: NutritionPlanCreateRequest) -> NutritionPlan:
        # Quota check and insert are separate statements; see check_nutrition_plan_quota
        plan = await EntitlementService.check_nutrition_plan_quota(self.db, user_id)

        if await NutritionPlanRepository.get_by_date(self.db, user_id, payload.plan_date) is not None:
            raise DuplicatePlanDateException()

        nutrition_plan = NutritionPlan(user_id=user_id, created_by=user_id, **payload.model_dump())
        self.db.add(nutrition_plan)
        await self._commit()

        logger.info(
            "Nutrition plan created",
            extra={
                "nutrition_plan.id": str(nutrition_plan.id),
                "user.id": str(user_id),
                "plan.name": plan.name,
            },
        )
        return nutrition_plan

    async def get(self, user_id: uuid.UUID, nutrition_plan_id: uuid.UUID) -> NutritionPlan:
        nutrition_plan = await NutritionPlanRepository.get_for_user(self.db, nutrition_plan_id, user_id)
        if nutrition_plan is None:
            raise NotFoundException("Nutrition plan not found")
        return nutrition_plan

    async def get_for_date(self, user_id: uuid.UUID, plan_date: date) -> NutritionPlan:
        nutrition_plan = await NutritionPlanRepository.get_by_date(self.db, user_id, plan_date)
        if nutrition_plan is None:
            raise NotFoundException("No nutrition plan found for this date")
        return nutrition_plan

    async def list_for_user(self, user_id: uuid.UUID, page: int, size: int) -> Tuple[Sequence[NutritionPlan], int]:
        items = await NutritionPlanRepository.list_for_user(self.db, user_id, offset=page * size, limit=size)
        total = await NutritionPlanRepository.count_for_user(self.db, user_id)
        return items, total

    async def get_week(self, user_id: uuid.UUID, reference_date: date) -> WeeklyNutritionPlans:
        """Plans of the Monday-to-Sunday week containing ``reference_date``, with completion stats."""
        week_start = reference_date - timedelta(days=reference_date.weekday())
        week_end = week_start + timedelta(days=6)
        plans = await NutritionPlanRepository.list_between(self.db, user_id, week_start, week_end)
        return WeeklyNutritionPlans(
            week_start=week_start,
            week_end=week_end,
            plans=[NutritionPlanResponse.model_validate(p) for p in plans],
            weekly_stats=_weekly_stats(plans),
        )

    async def list_pending(self, user_id: uuid.UUID, today: date) -> Sequence[NutritionPlan]:
        return await NutritionPlanRepository.list_pending(self.db, user_id, today)

    async def list_future(self, user_id: uuid.UUID, today: date) -> Sequence[NutritionPlan]:
        return await NutritionPlanRepository.list_future(self.db, user_id, today)

    async def update(
        self, user_id: uuid.UUID, nutrition_plan_id: uuid.UUID, payload: NutritionPlanUpdateRequest
    ) -> NutritionPlan:
        nutrition_plan = await self.get(user_id, nutrition_plan_id)
        changes = payload.model_dump(exclude_unset=True)

        for required in ("title", "plan_date"):
            if required in changes and changes[required] is None:
                raise ValidationException(f"{required} cannot be null")

        new_date = changes.get("plan_date")
        if new_date is not None and new_date != nutrition_plan.plan_date:
            if await NutritionPlanRepository.get_by_date(self.db, user_id, new_date) is not None:
                raise DuplicatePlanDateException()

        for field, value in changes.items():
            setattr(nutrition_plan, field, value)
        nutrition_plan.updated_by = user_id
        await self._commit()
        return nutrition_plan

    async def toggle_completion(self, user_id: uuid.UUID, nutrition_plan_id: uuid.UUID) -> NutritionPlan:
        nutrition_plan = await self.get(user_id, nutrition_plan_id)
        nutrition_plan.is_completed = not nutrition_plan.is_completed
        nutrition_plan.completed_at = utcnow() if nutrition_plan.is_completed else None
        nutrition_plan.updated_by = user_id
        await self._commit()
        return nutrition_plan

    async def delete(self, user_id: uuid.UUID, nutrition_plan_id: uuid.UUID) -> None:
        nutrition_plan = await self.get(user_id, nutrition_plan_id)
        await self.db.delete(nutrition_plan)
        await self._commit()
        logger.info(
            "Nutrition plan deleted",
            extra={"nutrition_plan.id": str(nutrition_plan_id), "user.id": str(user_id)},
        )

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except IntegrityError as exc:
            # Only unique constraint on this table is (user_id, plan_date)
            await self.db.rollback()
            raise DuplicatePlanDateException() from exc
