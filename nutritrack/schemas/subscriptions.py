"""Subscription and entitlement schemas."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from nutritrack.models import SubscriptionStatus


class SubscriptionCreateRequest(BaseModel):
    plan_id: uuid.UUID


class SubscriptionStatusUpdateRequest(BaseModel):
    """Administrative status change; dispatches to approve, reject or cancel."""

    status: SubscriptionStatus


class SubscriptionResponse(BaseModel):
    """Subscription with owner, plan and approver details resolved."""

    id: uuid.UUID
    user_id: uuid.UUID
    user_email: str
    user_name: Optional[str] = None
    plan_id: uuid.UUID
    plan_name: Optional[str] = Field(None, description="null when the plan has been deleted")
    plan_price: Optional[Decimal] = Field(None, description="Current catalog price")
    amount: Decimal = Field(..., description="Price snapshot taken when subscribing")
    status: SubscriptionStatus
    approved_by_user_id: Optional[uuid.UUID] = None
    approved_by_user_email: Optional[str] = None
    subscription_date: datetime
    approved_date: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class EntitlementResponse(BaseModel):
    """Caller's active plan and nutrition plan quota usage."""

    plan_id: Optional[uuid.UUID] = None
    plan_name: Optional[str] = None
    nutrition_plan_limit: Optional[int] = Field(None, description="null means unlimited")
    nutrition_plans_used: int = Field(..., ge=0)
    remaining: Optional[int] = Field(None, description="null means unlimited or no active plan")
