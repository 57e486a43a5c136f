from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker, AsyncEngine
from sqlalchemy.orm import DeclarativeBase

from storefront.config import Config


# SQLAlchemy Base for ORM models
class Base(DeclarativeBase):
    pass


def get_async_url(url: str, db_type: str) -> str:
    """Convert database URL to async SQLAlchemy format."""
    db_type = db_type.lower()
    if db_type == "postgresql":
        # Hosted Postgres providers often hand out postgres://
        url = url.replace("postgres://", "postgresql://", 1)
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    elif db_type == "mysql":
        return url.replace("mysql://", "mysql+aiomysql://", 1)
    elif db_type == "sqlite":
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


class Database:
    """Async engine and session factory for the catalog store."""

    def __init__(self, url: str | None = None, db_type: str | None = None):
        self.url = url or Config.DATABASE_URL
        self.db_type = db_type or Config.DATABASE_TYPE
        self.engine: AsyncEngine | None = None
        self.session_factory: async_sessionmaker[AsyncSession] | None = None

    async def connect(self):
        """Create database engine."""
        self.engine = create_async_engine(
            get_async_url(self.url, self.db_type),
            echo=Config.SQL_ECHO
        )
        self.session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    async def disconnect(self):
        """Close database engine."""
        if self.engine:
            await self.engine.dispose()
        self.engine = None
        self.session_factory = None

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        if not self.session_factory:
            await self.connect()

        async with self.session_factory() as session:
            yield session

    async def create_schema(self) -> list[str]:
        """Create every catalog table that does not exist yet.

        Returns the table names known to the metadata.
        """
        # Register all models on Base.metadata
        import storefront.models  # noqa: F401

        if not self.engine:
            await self.connect()

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        return sorted(Base.metadata.tables.keys())


db = Database()
