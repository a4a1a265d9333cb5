"""Repository layer for subscription-related database operations.

This module contains ONLY database access logic - no business rules.
Repository functions fetch data from the database and return raw models or primitive values.

Key Concepts:
- Subscription: A user's subscription to a plan, with a price snapshot in ``amount``
- Plan: A catalog entry; may have been deleted since the subscription was created
- Detail rows: (Subscription, owner User, Plan or None, approver email or None),
  produced by a single joined query so listings never issue per-row lookups
"""

import uuid
from typing import Optional, Sequence, Tuple

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from nutritrack.models import Plan, Subscription, SubscriptionStatus, User

SubscriptionDetail = Tuple[Subscription, User, Optional[Plan], Optional[str]]

_Approver = aliased(User, name="approver")


def _detail_query() -> Select:
    return (
        select(Subscription, User, Plan, _Approver.email)
        .join(User, Subscription.user_id == User.id)
        .outerjoin(Plan, Subscription.plan_id == Plan.id)
        .outerjoin(_Approver, Subscription.approved_by_user_id == _Approver.id)
    )


class SubscriptionRepository:
    """Repository for subscription database operations."""

    @staticmethod
    async def get_by_id(db: AsyncSession, subscription_id: uuid.UUID) -> Optional[Subscription]:
        result = await db.execute(select(Subscription).where(Subscription.id == subscription_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_for_update(db: AsyncSession, subscription_id: uuid.UUID) -> Optional[Subscription]:
        """
        Re-read a subscription with a row lock, refreshing any copy already in the session.

        Args:
            db: Database session (inside the caller's transaction)
            subscription_id: ID of the subscription to lock

        Returns:
            The locked Subscription, or None if it no longer exists
        """
        result = await db.execute(
            select(Subscription)
            .where(Subscription.id == subscription_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def lock_user(db: AsyncSession, user_id: uuid.UUID) -> Optional[User]:
        """
        Take a row lock on the user, serialising subscription changes per user.

        On PostgreSQL this blocks until any other transaction holding the
        same lock commits or rolls back. SQLite ignores FOR UPDATE.
        """
        result = await db.execute(
            select(User).where(User.id == user_id).with_for_update().execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_approved_for_user(
        db: AsyncSession, user_id: uuid.UUID, for_update: bool = False
    ) -> Sequence[Subscription]:
        """
        Fetch every APPROVED subscription for a user, most recently approved first.

        Args:
            db: Database session
            user_id: Owner of the subscriptions
            for_update: Lock the returned rows

        Returns:
            All APPROVED subscriptions (normally zero or one)
        """
        stmt = (
            select(Subscription)
            .where(
                Subscription.user_id == user_id,
                Subscription.status == SubscriptionStatus.APPROVED,
            )
            .order_by(Subscription.approved_date.desc(), Subscription.created_date.desc())
        )
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await db.execute(stmt)
        return result.scalars().all()

    @staticmethod
    async def count_approved_for_user(db: AsyncSession, user_id: uuid.UUID) -> int:
        result = await db.execute(
            select(func.count())
            .select_from(Subscription)
            .where(
                Subscription.user_id == user_id,
                Subscription.status == SubscriptionStatus.APPROVED,
            )
        )
        return int(result.scalar_one())

    @staticmethod
    async def get_active_plan_rows(db: AsyncSession, user_id: uuid.UUID) -> Sequence[Tuple[Subscription, Plan]]:
        """
        Fetch (Subscription, Plan) pairs for the user's APPROVED subscriptions.

        Args:
            db: Database session
            user_id: ID of the user whose entitlement is being resolved

        Returns:
            Pairs ordered most recently approved first; subscriptions whose
            plan has been deleted are not returned
        """
        result = await db.execute(
            select(Subscription, Plan)
            .join(Plan, Subscription.plan_id == Plan.id)
            .where(
                Subscription.user_id == user_id,
                Subscription.status == SubscriptionStatus.APPROVED,
            )
            .order_by(Subscription.approved_date.desc(), Subscription.created_date.desc())
        )
        return [(row[0], row[1]) for row in result.all()]

    @staticmethod
    async def get_detail(db: AsyncSession, subscription_id: uuid.UUID) -> Optional[SubscriptionDetail]:
        result = await db.execute(_detail_query().where(Subscription.id == subscription_id))
        row = result.first()
        return tuple(row) if row else None

    @staticmethod
    async def list_details(
        db: AsyncSession,
        user_id: Optional[uuid.UUID] = None,
        status: Optional[SubscriptionStatus] = None,
        oldest_first: bool = False,
    ) -> list[SubscriptionDetail]:
        """
        List subscriptions joined with owner, plan and approver.

        Args:
            db: Database session
            user_id: Restrict to one owner
            status: Restrict to one status
            oldest_first: Order by creation ascending instead of descending

        Returns:
            List of detail rows
        """
        stmt = _detail_query()
        if user_id is not None:
            stmt = stmt.where(Subscription.user_id == user_id)
        if status is not None:
            stmt = stmt.where(Subscription.status == status)
        if oldest_first:
            stmt = stmt.order_by(Subscription.created_date.asc(), Subscription.id.asc())
        else:
            stmt = stmt.order_by(Subscription.created_date.desc(), Subscription.id.desc())
        result = await db.execute(stmt)
        return [tuple(row) for row in result.all()]
