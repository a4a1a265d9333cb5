"""Nutrition plan schemas."""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class NutritionPlanFields(BaseModel):
    description: Optional[str] = None
    breakfast: Optional[str] = None
    morning_snack: Optional[str] = None
    lunch: Optional[str] = None
    afternoon_snack: Optional[str] = None
    dinner: Optional[str] = None
    evening_snack: Optional[str] = None
    total_calories: Optional[int] = Field(None, ge=0)
    total_proteins: Optional[Decimal] = Field(None, ge=0, max_digits=6, decimal_places=2)
    total_carbohydrates: Optional[Decimal] = Field(None, ge=0, max_digits=6, decimal_places=2)
    total_fats: Optional[Decimal] = Field(None, ge=0, max_digits=6, decimal_places=2)
    water_intake_ml: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None


class NutritionPlanCreateRequest(NutritionPlanFields):
    plan_date: date
    title: str = Field(..., min_length=1, max_length=200)


class NutritionPlanUpdateRequest(NutritionPlanFields):
    """Partial update: only fields present in the request body are applied."""

    plan_date: Optional[date] = None
    title: Optional[str] = Field(None, min_length=1, max_length=200)


class NutritionPlanResponse(NutritionPlanFields):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    plan_date: date
    title: str
    is_completed: bool
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None



class WeeklyStats(BaseModel):
    total_plans: int
    completed_plans: int
    pending_plans: int
    completion_rate: float = Field(..., description="Percentage of completed plans, 0-100")
    average_calories: float = Field(..., description="Mean over plans that record calories")
    total_water_intake_liters: float


class WeeklyNutritionPlans(BaseModel):
    """Monday-to-Sunday window around a reference date."""

    week_start: date
    week_end: date
    plans: list[NutritionPlanResponse]
    weekly_stats: WeeklyStats
