"""Authentication service for user signup and login."""

from datetime import timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from nutritrack.core.security import create_access_token, hash_password, verify_password
from nutritrack.models import User, UserRole
from nutritrack.utils.exceptions import EmailAlreadyRegisteredException


class AuthService:
    """Service for authentication operations."""

    @staticmethod
    async def create_user(
        db: AsyncSession,
        email: str,
        password: str,
        name: Optional[str] = None,
        role: UserRole = UserRole.USER,
    ) -> User:
        """Register a new user. New users get the USER role unless told otherwise."""
        if await AuthService.get_user_by_email(db, email) is not None:
            raise EmailAlreadyRegisteredException()

        user = User(
            email=email.lower(),
            password_hash=hash_password(password),
            name=name or email.split("@")[0],
            role=role,
            is_active=True,
        )
        db.add(user)
        try:
            await db.commit()
        except IntegrityError as exc:
            await db.rollback()
            raise EmailAlreadyRegisteredException() from exc
        await db.refresh(user)

        return user

    @staticmethod
    async def authenticate_email(
        db: AsyncSession,
        email: str,
        password: str,
    ) -> Optional[User]:
        """Authenticate an active user with email and password."""
        user = await AuthService.get_user_by_email(db, email)

        if not user or not user.password_hash or not user.is_active:
            return None

        if not verify_password(password, user.password_hash):
            return None

        return user

    @staticmethod
    async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
        """Get user by email."""
        result = await db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    @staticmethod
    def generate_token(user: User, remember_me: bool = False) -> str:
        """Generate JWT token for user."""
        expires_delta = timedelta(days=30) if remember_me else None
        return create_access_token(
            data={"sub": str(user.id), "role": user.role.value},
            expires_delta=expires_delta,
        )
