"""Plan catalog service.

Plans are reference data managed by administrators. Names are unique by
exact, case-sensitive match. Activation flags never cascade to existing
subscriptions, and deletion does not check for subscriptions that still
reference the plan.
"""

import logging
import uuid
from decimal import Decimal
from typing import Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from nutritrack.database.plan_repo import PlanRepository
from nutritrack.models import Plan
from nutritrack.utils.exceptions import DuplicateNameException, NotFoundException

logger = logging.getLogger(__name__)


class PlanService:
    """Service for plan catalog operations."""

    @staticmethod
    async def get_plan(db: AsyncSession, plan_id: uuid.UUID) -> Plan:
        plan = await PlanRepository.get_by_id(db, plan_id)
        if plan is None:
            raise NotFoundException("Plan not found")
        return plan

    @staticmethod
    async def list_active_plans(db: AsyncSession) -> Sequence[Plan]:
        """Active plans, cheapest first."""
        return await PlanRepository.list_active(db)

    @staticmethod
    async def list_all_plans(db: AsyncSession) -> Sequence[Plan]:
        return await PlanRepository.list_all(db)

    @staticmethod
    async def create_plan(
        db: AsyncSession,
        name: str,
        price: Decimal,
        description: Optional[str] = None,
        nutrition_plan_limit: Optional[int] = None,
        created_by: Optional[uuid.UUID] = None,
    ) -> Plan:
        """
        Create a new active plan.

        Raises:
            DuplicateNameException: a plan with exactly this name already exists
        """
        if await PlanRepository.get_by_name(db, name) is not None:
            raise DuplicateNameException()

        plan = Plan(
            name=name,
            price=price,
            description=description,
            nutrition_plan_limit=nutrition_plan_limit,
            is_active=True,
            created_by=created_by,
        )
        db.add(plan)
        await PlanService._commit_unique_name(db)

        logger.info("Plan created", extra={"plan.id": str(plan.id), "plan.name": plan.name})
        return plan

    @staticmethod
    async def update_plan(
        db: AsyncSession,
        plan_id: uuid.UUID,
        name: str,
        price: Decimal,
        description: Optional[str] = None,
        nutrition_plan_limit: Optional[int] = None,
        updated_by: Optional[uuid.UUID] = None,
    ) -> Plan:
        """
        Replace a plan's editable fields.

        The price change only affects subscriptions created afterwards;
        existing subscriptions keep their ``amount`` snapshot.

        Raises:
            NotFoundException: unknown plan id
            DuplicateNameException: the new name belongs to a different plan
        """
        plan = await PlanService.get_plan(db, plan_id)

        if name != plan.name:
            holder = await PlanRepository.get_by_name(db, name)
            if holder is not None and holder.id != plan.id:
                raise DuplicateNameException()

        plan.name = name
        plan.price = price
        plan.description = description
        plan.nutrition_plan_limit = nutrition_plan_limit
        plan.updated_by = updated_by
        await PlanService._commit_unique_name(db)

        logger.info("Plan updated", extra={"plan.id": str(plan.id), "plan.name": plan.name})
        return plan

    @staticmethod
    async def activate_plan(db: AsyncSession, plan_id: uuid.UUID, updated_by: Optional[uuid.UUID] = None) -> Plan:
        return await PlanService._set_active(db, plan_id, True, updated_by)

    @staticmethod
    async def deactivate_plan(db: AsyncSession, plan_id: uuid.UUID, updated_by: Optional[uuid.UUID] = None) -> Plan:
        return await PlanService._set_active(db, plan_id, False, updated_by)

    @staticmethod
    async def delete_plan(db: AsyncSession, plan_id: uuid.UUID) -> None:
        """Hard-delete a plan. Subscriptions referencing it are left as they are."""
        plan = await PlanService.get_plan(db, plan_id)
        await db.delete(plan)
        await PlanService._commit(db)
        logger.info("Plan deleted", extra={"plan.id": str(plan_id)})

    @staticmethod
    async def _set_active(
        db: AsyncSession, plan_id: uuid.UUID, active: bool, updated_by: Optional[uuid.UUID]
    ) -> Plan:
        plan = await PlanService.get_plan(db, plan_id)
        if plan.is_active != active:
            plan.is_active = active
            plan.updated_by = updated_by
            await PlanService._commit(db)
            logger.info(
                "Plan activation changed",
                extra={"plan.id": str(plan.id), "plan.is_active": active},
            )
        return plan

    @staticmethod
    async def _commit(db: AsyncSession) -> None:
        try:
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    @staticmethod
    async def _commit_unique_name(db: AsyncSession) -> None:
        # Two admins racing on the same name: the unique constraint decides
        try:
            await db.commit()
        except IntegrityError as exc:
            await db.rollback()
            raise DuplicateNameException() from exc
