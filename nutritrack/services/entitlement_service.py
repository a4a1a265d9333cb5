"""Entitlement gate and nutrition plan quota enforcement."""

import logging
import uuid
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from nutritrack.core.config import settings
from nutritrack.database.nutrition_plan_repo import NutritionPlanRepository
from nutritrack.database.subscription_repo import SubscriptionRepository
from nutritrack.models import Plan
from nutritrack.schemas.subscriptions import EntitlementResponse
from nutritrack.utils.exceptions import EntitlementRequiredException, QuotaExceededException

logger = logging.getLogger(__name__)


class EntitlementService:
    """Resolve a user's active plan and enforce its quota."""

    @staticmethod
    async def resolve_active_plan(db: AsyncSession, user_id: uuid.UUID) -> Optional[Plan]:
        """
        Return the plan of the user's APPROVED subscription, or None.

        Read-only. If several APPROVED subscriptions exist the most recently
        approved one wins and the anomaly is logged; nothing is repaired here.
        """
        rows = await SubscriptionRepository.get_active_plan_rows(db, user_id)
        if not rows:
            return None
        if len(rows) > 1:
            logger.warning(
                "User has more than one approved subscription",
                extra={"user.id": str(user_id), "subscription.approved_count": len(rows)},
            )
        return rows[0][1]

    @staticmethod
    async def check_nutrition_plan_quota(
        db: AsyncSession,
        user_id: uuid.UUID,
        lock: Optional[bool] = None,
    ) -> Plan:
        """
        Check that the user may create one more nutrition plan.

        Args:
            db: Database session of the creating request
            user_id: Owner of the new nutrition plan
            lock: Lock the user's row before counting so concurrent creations
                are serialised. Defaults to ``settings.QUOTA_LOCK_USER_ROW``;
                when off, two requests at the limit can both pass.

        Returns:
            The active plan that granted the entitlement

        Raises:
            EntitlementRequiredException: no active plan
            QuotaExceededException: usage is at or above the plan limit
        """
        if lock is None:
            lock = settings.QUOTA_LOCK_USER_ROW
        if lock:
            await SubscriptionRepository.lock_user(db, user_id)

        plan = await EntitlementService.resolve_active_plan(db, user_id)
        if plan is None:
            raise EntitlementRequiredException()

        limit = plan.nutrition_plan_limit
        if limit is None:
            return plan

        current = await NutritionPlanRepository.count_for_user(db, user_id)
        if current >= limit:
            logger.info(
                "Nutrition plan quota reached",
                extra={"user.id": str(user_id), "plan.id": str(plan.id), "quota.limit": limit, "quota.used": current},
            )
            raise QuotaExceededException(
                f"Nutrition plan limit reached. Your plan allows {limit} nutrition plans "
                f"and you already have {current}. Consider upgrading your subscription plan.",
                details={"plan": plan.name, "limit": limit, "current": current},
            )
        return plan

    @staticmethod
    async def get_entitlement(db: AsyncSession, user_id: uuid.UUID) -> EntitlementResponse:
        """Active plan and quota usage for display."""
        plan = await EntitlementService.resolve_active_plan(db, user_id)
        used = await NutritionPlanRepository.count_for_user(db, user_id)
        if plan is None:
            return EntitlementResponse(nutrition_plans_used=used)

        limit = plan.nutrition_plan_limit
        return EntitlementResponse(
            plan_id=plan.id,
            plan_name=plan.name,
            nutrition_plan_limit=limit,
            nutrition_plans_used=used,
            remaining=None if limit is None else max(0, limit - used),
        )
