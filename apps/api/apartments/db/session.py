"""Database session management."""
from __future__ import annotations

from collections.abc import AsyncGenerator
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from ..core.config import settings
from ..models import Base


def _ensure_sqlite_parent_dir(db_url: str) -> None:
    # sqlite+aiosqlite:///relative/path.db or sqlite+aiosqlite:////abs/path.db
    if not db_url.startswith("sqlite"):
        return
    _, _, path = db_url.partition(":///")
    if path in ("", ":memory:") or path.startswith(":memory:"):
        return
    Path(path).expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)


def create_engine(db_url: str | None = None) -> AsyncEngine:
    """Build the async engine for the configured database."""

    url = db_url or settings.database_url
    _ensure_sqlite_parent_dir(url)
    if url.startswith("sqlite"):
        # aiosqlite connections are bound to the loop that opened them.
        return create_async_engine(url, echo=settings.database_echo, poolclass=NullPool)
    return create_async_engine(url, echo=settings.database_echo, pool_pre_ping=True)


engine = create_engine()
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def create_schema(bind: AsyncEngine | None = None) -> None:
    """Create all tables that do not exist yet."""

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency to provide an async session."""

    async with SessionLocal() as session:
        yield session
