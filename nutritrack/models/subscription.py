"""Subscription model - User's subscription to a plan.

This module contains the Subscription model which links a user to a plan
and carries the subscription state machine (see ``SubscriptionStatus``).

Two storage-level guards back the single-active-subscription rule:

- ``version`` is the SQLAlchemy version counter, so two transactions
  updating the same row cannot both commit.
- ``uq_subscriptions_user_approved`` is a partial unique index that allows
  at most one APPROVED row per user.

``plan_id`` deliberately carries no foreign key: plans can be hard-deleted
while subscriptions still reference them. The price is snapshotted into
``amount`` at creation time.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Enum, ForeignKey, Index, Integer, Numeric, text
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP

from nutritrack.models.base import Base
from nutritrack.models.models import TimestampMixin, UUIDMixin, utcnow
from nutritrack.models.subscription_enums import SubscriptionStatus

class Subscription(UUIDMixin, TimestampMixin, Base):
    """User subscription model.

    Created PENDING by the owner; approved or rejected by an administrator;
    an APPROVED subscription can later be cancelled.
    """

    __tablename__ = "tbl_subscriptions"
    __table_args__ = (
        Index("ix_subscriptions_user", "user_id"),
        Index("ix_subscriptions_status", "status"),
        Index("ix_subscriptions_plan", "plan_id"),
        Index(
            "uq_subscriptions_user_approved",
            "user_id",
            unique=True,
            postgresql_where=text("status = 'APPROVED'"),
            sqlite_where=text("status = 'APPROVED'"),
        ),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        PGUUID(as_uuid=True), ForeignKey("tbl_users.id", ondelete="CASCADE"), nullable=False
    )
    plan_id: Mapped[uuid.UUID] = mapped_column(PGUUID(as_uuid=True), nullable=False)
    status: Mapped[SubscriptionStatus] = mapped_column(
        Enum(SubscriptionStatus, name="subscription_status", native_enum=False),
        nullable=False,
        default=SubscriptionStatus.PENDING,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    subscription_date: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
    approved_by_user_id: Mapped[Optional[uuid.UUID]] = mapped_column(PGUUID(as_uuid=True))
    approved_date: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True))
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    @property
    def is_pending(self) -> bool:
        return self.status == SubscriptionStatus.PENDING

    @property
    def is_approved(self) -> bool:
        return self.status == SubscriptionStatus.APPROVED

    def approve(self, admin_user_id: uuid.UUID) -> None:
        self.status = SubscriptionStatus.APPROVED
        self.approved_by_user_id = admin_user_id
        self.approved_date = utcnow()
        self.updated_by = admin_user_id

    def reject(self, admin_user_id: uuid.UUID) -> None:
        # Rejections reuse the approval audit fields
        self.status = SubscriptionStatus.REJECTED
        self.approved_by_user_id = admin_user_id
        self.approved_date = utcnow()
        self.updated_by = admin_user_id

    def cancel(self, cancelled_by: uuid.UUID) -> None:
        self.status = SubscriptionStatus.CANCELLED
        self.updated_by = cancelled_by
