"""Plan model - Subscription plan catalog.

A plan has a unique name, a price and an optional nutrition plan quota.
A null ``nutrition_plan_limit`` means the plan allows an unlimited number
of nutrition plans.
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, Integer, Numeric, String, Text, true
from sqlalchemy.orm import Mapped, mapped_column

from nutritrack.models.base import Base
from nutritrack.models.models import TimestampMixin, UUIDMixin


class Plan(UUIDMixin, TimestampMixin, Base):
    """Subscription plan model (e.g. Basic, Premium).

    Deactivating a plan hides it from the public catalog and blocks new
    subscriptions to it; existing subscriptions are left untouched.
    """

    __tablename__ = "tbl_mstr_plans"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_plans_price_non_negative"),
        CheckConstraint(
            "nutrition_plan_limit IS NULL OR nutrition_plan_limit >= 0",
            name="ck_plans_limit_non_negative",
        ),
    )

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    nutrition_plan_limit: Mapped[Optional[int]] = mapped_column(Integer)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())

    @property
    def has_unlimited_nutrition_plans(self) -> bool:
        return self.nutrition_plan_limit is None
