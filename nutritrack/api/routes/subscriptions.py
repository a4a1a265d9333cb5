"""Subscription lifecycle routes."""

import uuid

from fastapi import APIRouter, status

from nutritrack.api.deps import AdminUser, CurrentUser, DB
from nutritrack.models import SubscriptionStatus
from nutritrack.schemas.subscriptions import SubscriptionCreateRequest, SubscriptionStatusUpdateRequest
from nutritrack.services.entitlement_service import EntitlementService
from nutritrack.services.subscription_service import SubscriptionService
from nutritrack.utils.envelopes import api_success
from nutritrack.utils.exceptions import (
    AppException,
    InvalidTransitionException,
    NotFoundException,
    ValidationException,
)

router = APIRouter(tags=["subscriptions"])


@router.post("/subscriptions", response_model=dict, status_code=status.HTTP_201_CREATED)
async def create_subscription(payload: SubscriptionCreateRequest, current_user: CurrentUser, db: DB):
    """Request a subscription to a plan. It stays PENDING until an administrator acts on it."""
    try:
        subscription = await SubscriptionService.create_subscription(db, current_user.id, payload.plan_id)
    except NotFoundException as exc:
        # An unknown plan is a bad request body, not a missing resource
        raise AppException(code=exc.code, message=exc.message, status_code=status.HTTP_400_BAD_REQUEST) from exc
    return api_success(subscription.model_dump())


@router.get("/subscriptions", response_model=dict)
async def list_my_subscriptions(current_user: CurrentUser, db: DB):
    subscriptions = await SubscriptionService.list_user_subscriptions(db, current_user.id)
    return api_success([s.model_dump() for s in subscriptions])


@router.get("/subscriptions/all", response_model=dict)
async def list_all_subscriptions(admin: AdminUser, db: DB):
    subscriptions = await SubscriptionService.list_all_subscriptions(db)
    return api_success([s.model_dump() for s in subscriptions])


@router.get("/subscriptions/pending", response_model=dict)
async def list_pending_subscriptions(admin: AdminUser, db: DB):
    subscriptions = await SubscriptionService.list_pending_subscriptions(db)
    return api_success([s.model_dump() for s in subscriptions])


@router.get("/subscriptions/status/{status_name}", response_model=dict)
async def list_subscriptions_by_status(status_name: str, admin: AdminUser, db: DB):
    try:
        subscription_status = SubscriptionStatus(status_name.upper())
    except ValueError:
        raise ValidationException(
            f"Unknown subscription status: {status_name}",
            details={"allowed": [s.value for s in SubscriptionStatus]},
        )
    subscriptions = await SubscriptionService.list_subscriptions_by_status(db, subscription_status)
    return api_success([s.model_dump() for s in subscriptions])


@router.get("/subscriptions/count/active", response_model=dict)
async def count_my_active_subscriptions(current_user: CurrentUser, db: DB):
    count = await SubscriptionService.count_active_subscriptions(db, current_user.id)
    return api_success(count)


@router.get("/subscriptions/me/entitlement", response_model=dict)
async def get_my_entitlement(current_user: CurrentUser, db: DB):
    """Active plan and nutrition plan quota usage of the caller."""
    entitlement = await EntitlementService.get_entitlement(db, current_user.id)
    return api_success(entitlement.model_dump())


@router.get("/subscriptions/{subscription_id}", response_model=dict)
async def get_subscription(subscription_id: uuid.UUID, current_user: CurrentUser, db: DB):
    viewer_id = None if current_user.is_admin else current_user.id
    subscription = await SubscriptionService.get_subscription(db, subscription_id, viewer_id=viewer_id)
    return api_success(subscription.model_dump())


@router.patch("/subscriptions/{subscription_id}/status", response_model=dict)
async def update_subscription_status(
    subscription_id: uuid.UUID,
    payload: SubscriptionStatusUpdateRequest,
    admin: AdminUser,
    db: DB,
):
    try:
        subscription = await SubscriptionService.update_subscription_status(
            db, subscription_id, admin.id, payload.status
        )
    except InvalidTransitionException as exc:
        raise InvalidTransitionException(exc.message, status_code=status.HTTP_400_BAD_REQUEST) from exc
    return api_success(subscription.model_dump())


@router.patch("/subscriptions/{subscription_id}/approve", response_model=dict)
async def approve_subscription(subscription_id: uuid.UUID, admin: AdminUser, db: DB):
    subscription = await SubscriptionService.approve_subscription(db, subscription_id, admin.id)
    return api_success(subscription.model_dump())


@router.patch("/subscriptions/{subscription_id}/reject", response_model=dict)
async def reject_subscription(subscription_id: uuid.UUID, admin: AdminUser, db: DB):
    subscription = await SubscriptionService.reject_subscription(db, subscription_id, admin.id)
    return api_success(subscription.model_dump())


@router.patch("/subscriptions/{subscription_id}/cancel", response_model=dict)
async def cancel_subscription(subscription_id: uuid.UUID, current_user: CurrentUser, db: DB):
    """Owners cancel their own APPROVED subscription; administrators use the status endpoint."""
    subscription = await SubscriptionService.cancel_subscription(db, subscription_id, current_user.id)
    return api_success(subscription.model_dump())
