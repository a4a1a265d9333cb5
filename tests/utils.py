"""Seed helpers shared by the service and API tests."""

from __future__ import annotations

import asyncio
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from nutritrack.core.config import settings
from nutritrack.core.security import create_access_token, hash_password
from nutritrack.database.subscription_repo import SubscriptionRepository
from nutritrack.models import NutritionPlan, Plan, Subscription, SubscriptionStatus, User, UserRole
from nutritrack.models.models import utcnow

API_PREFIX = settings.API_PREFIX.rstrip("/")
PASSWORD = "correct-horse-1"


async def seed_user(
    session: AsyncSession,
    email: str,
    role: UserRole = UserRole.USER,
    name: Optional[str] = None,
) -> User:
    user = User(
        email=email,
        password_hash=hash_password(PASSWORD),
        name=name or email.split("@")[0],
        role=role,
        is_active=True,
    )
    session.add(user)
    await session.commit()
    return user


async def seed_admin(session: AsyncSession, email: str = "admin@example.com") -> User:
    return await seed_user(session, email, role=UserRole.ADMIN, name="Admin")


async def seed_plan(
    session: AsyncSession,
    name: str,
    price: str = "9.99",
    limit: Optional[int] = None,
    is_active: bool = True,
) -> Plan:
    plan = Plan(name=name, price=Decimal(price), nutrition_plan_limit=limit, is_active=is_active)
    session.add(plan)
    await session.commit()
    return plan


async def seed_subscription(
    session: AsyncSession,
    user: User,
    plan: Plan,
    status: SubscriptionStatus = SubscriptionStatus.PENDING,
    approved_by: Optional[User] = None,
) -> Subscription:
    subscription = Subscription(user_id=user.id, plan_id=plan.id, amount=plan.price, status=status)
    if status in (SubscriptionStatus.APPROVED, SubscriptionStatus.REJECTED):
        subscription.approved_by_user_id = approved_by.id if approved_by else None
        subscription.approved_date = utcnow()
    session.add(subscription)
    await session.commit()
    return subscription


async def seed_nutrition_plans(
    session: AsyncSession, user: User, count: int, start: date = date(2026, 1, 1)
) -> List[NutritionPlan]:
    plans = [
        NutritionPlan(user_id=user.id, plan_date=start + timedelta(days=i), title=f"Day {i + 1}")
        for i in range(count)
    ]
    session.add_all(plans)
    await session.commit()
    return plans


async def seed_nutrition_plan(session: AsyncSession, user: User, day: date, **fields: object) -> NutritionPlan:
    nutrition_plan = NutritionPlan(user_id=user.id, plan_date=day, title=fields.pop("title", day.isoformat()), **fields)
    session.add(nutrition_plan)
    await session.commit()
    return nutrition_plan


def build_auth_header(user: User) -> Dict[str, str]:
    token = create_access_token({"sub": str(user.id), "role": user.role.value})
    return {"Authorization": f"Bearer {token}"}


def nutrition_plan_payload(day: date, title: str = "Meal plan") -> Dict[str, object]:
    return {
        "plan_date": day.isoformat(),
        "title": title,
        "breakfast": "Oats and berries",
        "lunch": "Chicken salad",
        "dinner": "Salmon with rice",
        "total_calories": 1850,
        "water_intake_ml": 2000,
    }


def interleave_approvals(monkeypatch, parties: int = 2) -> None:
    """Hold every approval after it has read the user's APPROVED set until all ``parties`` have read it.

    Forces the lost-update interleaving: each approval decides what to cancel
    before any of them writes.
    """
    original = SubscriptionRepository.get_approved_for_user
    arrived = 0
    all_read = asyncio.Event()

    async def _read_then_wait(db, user_id, for_update=False):
        nonlocal arrived
        rows = await original(db, user_id, for_update=for_update)
        arrived += 1
        if arrived >= parties:
            all_read.set()
        await asyncio.wait_for(all_read.wait(), timeout=5)
        return rows

    monkeypatch.setattr(SubscriptionRepository, "get_approved_for_user", staticmethod(_read_then_wait))
