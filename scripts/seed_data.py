"""Seed database with initial data (plans, admin user)."""

import asyncio
import os
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from nutritrack.core.config import settings
from nutritrack.core.db import _ensure_async_url
from nutritrack.core.security import hash_password
from nutritrack.models import Plan, User, UserRole


async def seed_plans(session: AsyncSession) -> None:
    """Create or update subscription plans."""
    plans_data = [
        {
            "name": "Basic",
            "price": Decimal("9.99"),
            "description": "One nutrition plan at a time",
            "nutrition_plan_limit": 1,
        },
        {
            "name": "Premium",
            "price": Decimal("19.99"),
            "description": "Unlimited nutrition plans",
            "nutrition_plan_limit": None,  # Unlimited
        },
    ]

    for plan_data in plans_data:
        result = await session.execute(select(Plan).where(Plan.name == plan_data["name"]))
        existing_plan = result.scalar_one_or_none()

        if existing_plan:
            existing_plan.price = plan_data["price"]
            existing_plan.description = plan_data["description"]
            existing_plan.nutrition_plan_limit = plan_data["nutrition_plan_limit"]
            print(f"✓ Updated plan: {plan_data['name']}")
        else:
            session.add(Plan(is_active=True, **plan_data))
            print(f"✓ Created plan: {plan_data['name']}")

    await session.commit()


async def seed_admin_user(session: AsyncSession) -> None:
    """Create the administrator account used to approve subscriptions."""
    admin_email = os.environ.get("SEED_ADMIN_EMAIL", "admin@nutritrack.io").lower()
    admin_password = os.environ.get("SEED_ADMIN_PASSWORD", "admin123456")

    result = await session.execute(select(User).where(User.email == admin_email))
    existing_user = result.scalar_one_or_none()

    if existing_user:
        if existing_user.role != UserRole.ADMIN:
            existing_user.role = UserRole.ADMIN
            await session.commit()
            print(f"✓ Promoted existing user to admin: {admin_email}")
        else:
            print(f"✓ Admin user already exists: {admin_email}")
        return

    session.add(
        User(
            email=admin_email,
            password_hash=hash_password(admin_password),
            name="Administrator",
            role=UserRole.ADMIN,
            is_active=True,
        )
    )
    await session.commit()
    print(f"✓ Created admin user: {admin_email}")


async def main() -> None:
    if not settings.DATABASE_URL:
        raise SystemExit("DATABASE_URL is not configured")

    engine = create_async_engine(_ensure_async_url(settings.DATABASE_URL))
    session_factory = async_sessionmaker(engine, expire_on_commit=False)

    async with session_factory() as session:
        print("Seeding plans...")
        await seed_plans(session)
        print("Seeding admin user...")
        await seed_admin_user(session)

    await engine.dispose()
    print("✓ Done")


if __name__ == "__main__":
    asyncio.run(main())
