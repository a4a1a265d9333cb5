"""
Subscription service - owns the subscription state machine.

This module handles:
- Creating subscriptions (always PENDING, price snapshotted from the plan)
- Administrative approve / reject and the umbrella status update
- Owner cancellation of an APPROVED subscription
- Joined read models for listings

Architecture:
- Repository (nutritrack.database.subscription_repo): database queries only
- Service (this module): business rules, transactions, response shaping
- Routes (nutritrack.api.routes.subscriptions): HTTP mapping only

Single active subscription:
    A user has at most one APPROVED subscription. Approval is the only
    operation that can create an APPROVED row, and it runs as one
    transaction that:

    1. locks the owner's user row, serialising approvals per user
    2. re-reads the target under a row lock and re-checks it is PENDING
    3. cancels every APPROVED subscription the owner currently has
    4. marks the target APPROVED and commits

    The ``version`` column and the partial unique index on APPROVED rows
    turn any lost race into a ConflictException after a full rollback.

Every operation takes the acting user's id explicitly.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from nutritrack.database.plan_repo import PlanRepository
from nutritrack.database.subscription_repo import SubscriptionDetail, SubscriptionRepository
from nutritrack.models import Subscription, SubscriptionStatus, User
from nutritrack.schemas.subscriptions import SubscriptionResponse
from nutritrack.utils.exceptions import (
    AppException,
    ConflictException,
    ForbiddenException,
    InvalidTransitionException,
    NotFoundException,
    PlanInactiveException,
)

logger = logging.getLogger(__name__)


class SubscriptionService:
    """Service for the subscription lifecycle."""

    @staticmethod
    def to_response(detail: SubscriptionDetail) -> SubscriptionResponse:
        """
        Build the API read model from a joined detail row.

        Args:
            detail: (Subscription, owner User, Plan or None, approver email or None)

        Returns:
            SubscriptionResponse; plan fields are None when the plan was deleted
        """
        subscription, user, plan, approver_email = detail
        return SubscriptionResponse(
            id=subscription.id,
            user_id=subscription.user_id,
            user_email=user.email,
            user_name=user.name,
            plan_id=subscription.plan_id,
            plan_name=plan.name if plan is not None else None,
            plan_price=plan.price if plan is not None else None,
            amount=subscription.amount,
            status=subscription.status,
            approved_by_user_id=subscription.approved_by_user_id,
            approved_by_user_email=approver_email,
            subscription_date=subscription.subscription_date,
            approved_date=subscription.approved_date,
            created_at=subscription.created_at,
            updated_at=subscription.updated_at,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @staticmethod
    async def get_subscription(
        db: AsyncSession,
        subscription_id: uuid.UUID,
        viewer_id: Optional[uuid.UUID] = None,
    ) -> SubscriptionResponse:
        """
        Fetch one subscription with owner and plan details.

        Args:
            db: Database session
            subscription_id: ID of the subscription
            viewer_id: When given, only subscriptions owned by this user are
                visible; anything else is reported as not found

        Raises:
            NotFoundException: unknown id, or not visible to ``viewer_id``
        """
        detail = await SubscriptionRepository.get_detail(db, subscription_id)
        if detail is None or (viewer_id is not None and detail[0].user_id != viewer_id):
            raise NotFoundException("Subscription not found")
        return SubscriptionService.to_response(detail)

    @staticmethod
    async def list_user_subscriptions(db: AsyncSession, user_id: uuid.UUID) -> list[SubscriptionResponse]:
        rows = await SubscriptionRepository.list_details(db, user_id=user_id)
        return [SubscriptionService.to_response(row) for row in rows]

    @staticmethod
    async def list_all_subscriptions(db: AsyncSession) -> list[SubscriptionResponse]:
        rows = await SubscriptionRepository.list_details(db)
        return [SubscriptionService.to_response(row) for row in rows]

    @staticmethod
    async def list_subscriptions_by_status(
        db: AsyncSession, status: SubscriptionStatus
    ) -> list[SubscriptionResponse]:
        rows = await SubscriptionRepository.list_details(db, status=status)
        return [SubscriptionService.to_response(row) for row in rows]

    @staticmethod
    async def list_pending_subscriptions(db: AsyncSession) -> list[SubscriptionResponse]:
        """Pending subscriptions, oldest first (approval queue order)."""
        rows = await SubscriptionRepository.list_details(
            db, status=SubscriptionStatus.PENDING, oldest_first=True
        )
        return [SubscriptionService.to_response(row) for row in rows]

    @staticmethod
    async def count_active_subscriptions(db: AsyncSession, user_id: uuid.UUID) -> int:
        """
        Count APPROVED subscriptions for a user.

        The result should be 0 or 1. Larger values are logged as a data
        integrity anomaly and returned as-is.
        """
        count = await SubscriptionRepository.count_approved_for_user(db, user_id)
        if count > 1:
            logger.warning(
                "User has more than one approved subscription",
                extra={"user.id": str(user_id), "subscription.approved_count": count},
            )
        return count

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @staticmethod
    async def create_subscription(
        db: AsyncSession, user_id: uuid.UUID, plan_id: uuid.UUID
    ) -> SubscriptionResponse:
        """
        Request a subscription to a plan.

        The new subscription is PENDING and stores the plan's current price
        in ``amount``. Other subscriptions of the user are not inspected.

        Args:
            db: Database session
            user_id: Subscribing user
            plan_id: Requested plan

        Returns:
            The created subscription

        Raises:
            NotFoundException: unknown user or plan
            PlanInactiveException: plan is deactivated
        """
        # Step 1: Validate user and plan
        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundException("User not found")

        plan = await PlanRepository.get_by_id(db, plan_id)
        if plan is None:
            raise NotFoundException("Plan not found")
        if not plan.is_active:
            raise PlanInactiveException()

        # Step 2: Insert PENDING row with the price snapshot
        subscription = Subscription(
            user_id=user.id,
            plan_id=plan.id,
            status=SubscriptionStatus.PENDING,
            amount=plan.price,
            created_by=user.id,
        )
        db.add(subscription)
        try:
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Subscription requested",
            extra={
                "subscription.id": str(subscription.id),
                "user.id": str(user.id),
                "plan.id": str(plan.id),
            },
        )
        return await SubscriptionService.get_subscription(db, subscription.id)

    @staticmethod
    async def approve_subscription(
        db: AsyncSession, subscription_id: uuid.UUID, admin_user_id: uuid.UUID
    ) -> SubscriptionResponse:
        """
        Approve a PENDING subscription, cancelling the owner's current one.

        Steps 1-4 run in a single transaction; any failure rolls all of
        them back.

        Args:
            db: Database session
            subscription_id: Subscription to approve
            admin_user_id: Approving administrator

        Returns:
            The approved subscription

        Raises:
            NotFoundException: unknown id
            InvalidTransitionException: subscription is not PENDING
            ConflictException: a concurrent change won; safe to retry
        """
        subscription = await SubscriptionRepository.get_by_id(db, subscription_id)
        if subscription is None:
            raise NotFoundException("Subscription not found")
        if not subscription.is_pending:
            raise InvalidTransitionException("Only pending subscriptions can be approved")

        owner_id = subscription.user_id
        try:
            # Step 1: Serialise approvals for this owner
            await SubscriptionRepository.lock_user(db, owner_id)

            # Step 2: Re-check the target now that we hold the lock
            subscription = await SubscriptionRepository.get_for_update(db, subscription_id)
            if subscription is None:
                raise NotFoundException("Subscription not found")
            if not subscription.is_pending:
                raise InvalidTransitionException("Only pending subscriptions can be approved")

            # Step 3: Cancel every currently approved subscription
            previous = await SubscriptionRepository.get_approved_for_user(db, owner_id, for_update=True)
            if len(previous) > 1:
                logger.warning(
                    "Cancelling multiple approved subscriptions for one user",
                    extra={"user.id": str(owner_id), "subscription.approved_count": len(previous)},
                )
            for other in previous:
                other.cancel(admin_user_id)
            # Cancellations must reach the database before the approval
            await db.flush()

            # Step 4: Approve the target
            subscription.approve(admin_user_id)
            await db.commit()
        except AppException:
            # Nothing has been written yet
            raise
        except (IntegrityError, StaleDataError) as exc:
            await db.rollback()
            logger.warning(
                "Subscription approval lost a concurrent update",
                extra={"subscription.id": str(subscription_id), "user.id": str(owner_id)},
            )
            raise ConflictException() from exc
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Subscription approved",
            extra={
                "subscription.id": str(subscription_id),
                "user.id": str(owner_id),
                "admin.id": str(admin_user_id),
                "subscription.cancelled_ids": [str(s.id) for s in previous],
            },
        )
        return await SubscriptionService.get_subscription(db, subscription_id)

    @staticmethod
    async def reject_subscription(
        db: AsyncSession, subscription_id: uuid.UUID, admin_user_id: uuid.UUID
    ) -> SubscriptionResponse:
        """
        Reject a PENDING subscription.

        Stamps the same approver audit fields as approval. No other
        subscription is touched.

        Raises:
            NotFoundException: unknown id
            InvalidTransitionException: subscription is not PENDING
            ConflictException: a concurrent change won; safe to retry
        """
        try:
            subscription = await SubscriptionRepository.get_for_update(db, subscription_id)
            if subscription is None:
                raise NotFoundException("Subscription not found")
            if not subscription.is_pending:
                raise InvalidTransitionException("Only pending subscriptions can be rejected")

            subscription.reject(admin_user_id)
            await db.commit()
        except AppException:
            raise
        except StaleDataError as exc:
            await db.rollback()
            raise ConflictException() from exc
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Subscription rejected",
            extra={"subscription.id": str(subscription_id), "admin.id": str(admin_user_id)},
        )
        return await SubscriptionService.get_subscription(db, subscription_id)

    @staticmethod
    async def cancel_subscription(
        db: AsyncSession, subscription_id: uuid.UUID, requesting_user_id: uuid.UUID
    ) -> SubscriptionResponse:
        """
        Cancel an APPROVED subscription on behalf of its owner.

        Raises:
            NotFoundException: unknown id
            ForbiddenException: caller does not own the subscription
            InvalidTransitionException: subscription is not APPROVED
        """
        return await SubscriptionService._cancel(
            db, subscription_id, requesting_user_id, enforce_ownership=True
        )

    @staticmethod
    async def update_subscription_status(
        db: AsyncSession,
        subscription_id: uuid.UUID,
        admin_user_id: uuid.UUID,
        target_status: SubscriptionStatus,
    ) -> SubscriptionResponse:
        """
        Administrative status change.

        Dispatches to approve, reject or cancel. Cancellation through this
        path skips the ownership check. Any other target status is invalid.

        Raises:
            NotFoundException: unknown id
            InvalidTransitionException: target status not reachable
        """
        if await SubscriptionRepository.get_by_id(db, subscription_id) is None:
            raise NotFoundException("Subscription not found")

        if target_status == SubscriptionStatus.APPROVED:
            return await SubscriptionService.approve_subscription(db, subscription_id, admin_user_id)
        if target_status == SubscriptionStatus.REJECTED:
            return await SubscriptionService.reject_subscription(db, subscription_id, admin_user_id)
        if target_status == SubscriptionStatus.CANCELLED:
            return await SubscriptionService._cancel(
                db, subscription_id, admin_user_id, enforce_ownership=False
            )
        raise InvalidTransitionException("Invalid status update")

    @staticmethod
    async def _cancel(
        db: AsyncSession,
        subscription_id: uuid.UUID,
        acting_user_id: uuid.UUID,
        enforce_ownership: bool,
    ) -> SubscriptionResponse:
        try:
            subscription = await SubscriptionRepository.get_for_update(db, subscription_id)
            if subscription is None:
                raise NotFoundException("Subscription not found")
            if enforce_ownership and subscription.user_id != acting_user_id:
                raise ForbiddenException("You can only cancel your own subscriptions")
            if not subscription.is_approved:
                raise InvalidTransitionException("Only approved subscriptions can be cancelled")

            subscription.cancel(acting_user_id)
            await db.commit()
        except AppException:
            raise
        except StaleDataError as exc:
            await db.rollback()
            raise ConflictException() from exc
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Subscription cancelled",
            extra={"subscription.id": str(subscription_id), "actor.id": str(acting_user_id)},
        )
        return await SubscriptionService.get_subscription(db, subscription_id)
