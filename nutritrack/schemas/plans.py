"""Plan catalog schemas."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PlanRequest(BaseModel):
    """Create or replace a plan."""

    name: str = Field(..., min_length=1, max_length=100)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    description: Optional[str] = Field(None, max_length=500)
    nutrition_plan_limit: Optional[int] = Field(None, ge=0, description="null means unlimited")


class PlanResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    price: Decimal
    description: Optional[str] = None
    nutrition_plan_limit: Optional[int] = Field(None, description="null means unlimited")
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
