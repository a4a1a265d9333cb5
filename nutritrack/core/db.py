from __future__ import annotations

import logging
from typing import AsyncGenerator, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from nutritrack.core.config import settings

logger = logging.getLogger(__name__)

_engine: Optional[AsyncEngine] = None
_SessionLocal: Optional[async_sessionmaker[AsyncSession]] = None

_ASYNC_DRIVERS: Dict[str, str] = {
	"postgres://": "postgresql+asyncpg://",
	"postgresql://": "postgresql+asyncpg://",
	"postgresql+psycopg2://": "postgresql+asyncpg://",
	"postgresql+psycopg://": "postgresql+asyncpg://",
	"sqlite://": "sqlite+aiosqlite://",
}


def _ensure_async_url(url: str) -> str:
	"""Rewrite provider URLs (`postgres://`, sync psycopg, plain sqlite) to an async driver.

	URLs that already name asyncpg or aiosqlite, or an unknown scheme, pass through.
	"""
	for scheme, driver in _ASYNC_DRIVERS.items():
		if url.startswith(scheme):
			return driver + url[len(scheme):]
	return url


def init_engine_and_session() -> None:
	global _engine, _SessionLocal
	if _engine is not None:
		return
	if not settings.DATABASE_URL:
		raise RuntimeError("DATABASE_URL is not configured. Set it in the environment or .env file.")
	database_url = _ensure_async_url(settings.DATABASE_URL)
	_engine = create_async_engine(database_url, pool_pre_ping=True)
	_SessionLocal = async_sessionmaker(bind=_engine, expire_on_commit=False)
	logger.info("Database engine initialised", extra={"db.system": _engine.dialect.name})


async def dispose_engine() -> None:
	global _engine, _SessionLocal
	if _engine is None:
		return
	await _engine.dispose()
	_engine = None
	_SessionLocal = None


async def get_db() -> AsyncGenerator[AsyncSession, None]:
	if _SessionLocal is None:
		init_engine_and_session()
	assert _SessionLocal is not None
	async with _SessionLocal() as session:
		yield session
