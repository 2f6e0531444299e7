"""Database connection and session management."""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from leasing.config import settings

DATABASE_URL = settings.database_url


def to_async_url(database_url: str) -> str:
    """Translate a sync SQLite URL into its aiosqlite form.

    Other URLs are expected to name an async driver already
    (e.g. ``postgresql+asyncpg://``).
    """
    if database_url.startswith("sqlite:///"):
        return database_url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    return database_url


# SQLite uses StaticPool for simplicity in dev/test
if DATABASE_URL.startswith("sqlite"):
    async_engine = create_async_engine(
        to_async_url(DATABASE_URL),
        echo=settings.database_echo,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    async_engine = create_async_engine(
        to_async_url(DATABASE_URL), echo=settings.database_echo, pool_pre_ping=True
    )

AsyncSessionLocal = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Get async database session."""
    async with AsyncSessionLocal() as session:
        yield session


__all__ = [
    "AsyncSessionLocal",
    "get_async_session",
    "async_engine",
    "to_async_url",
]
