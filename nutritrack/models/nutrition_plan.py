"""NutritionPlan model - a user's meal plan for one day.

Nutrition plans are the resource gated by the subscription quota: each
one counts as a unit against the owner's active plan limit.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, Date, ForeignKey, Index, Integer, Numeric, String, Text, UniqueConstraint, false
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TIMESTAMP

from nutritrack.models.base import Base
from nutritrack.models.models import TimestampMixin, UUIDMixin


class NutritionPlan(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "tbl_nutrition_plans"
    __table_args__ = (
        UniqueConstraint("user_id", "plan_date", name="uq_nutrition_plan_user_date"),
        Index("ix_nutrition_plans_user", "user_id"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        PGUUID(as_uuid=True), ForeignKey("tbl_users.id", ondelete="CASCADE"), nullable=False
    )
    plan_date: Mapped[date] = mapped_column(Date, nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)

    breakfast: Mapped[Optional[str]] = mapped_column(Text)
    morning_snack: Mapped[Optional[str]] = mapped_column(Text)
    lunch: Mapped[Optional[str]] = mapped_column(Text)
    afternoon_snack: Mapped[Optional[str]] = mapped_column(Text)
    dinner: Mapped[Optional[str]] = mapped_column(Text)
    evening_snack: Mapped[Optional[str]] = mapped_column(Text)

    total_calories: Mapped[Optional[int]] = mapped_column(Integer)
    total_proteins: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2))
    total_carbohydrates: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2))
    total_fats: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2))
    water_intake_ml: Mapped[Optional[int]] = mapped_column(Integer)

    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    completed_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True))
    notes: Mapped[Optional[str]] = mapped_column(Text)
