"""
Async engine and session factories (SQLAlchemy + asyncpg).

Request handlers get a session through ``get_db``; background work such as
bulk enrichment opens its own with ``get_async_session_context``.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from prospector.core.config import settings

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
)

# Objects stay loaded after commit; enrichment commits after every provider step
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

AsyncSessionLocal = async_session_maker


@asynccontextmanager
async def get_async_session_context() -> AsyncGenerator[AsyncSession, None]:
    """Session that commits on success and rolls back on any error."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding one session per request.

    Usage:
        @router.get("/contacts/{contact_id}")
        async def get_contact(contact_id: UUID, db: AsyncSession = Depends(get_db)):
            ...
    """
    async with get_async_session_context() as session:
        yield session
