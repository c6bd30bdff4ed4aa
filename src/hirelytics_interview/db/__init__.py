"""
Database module for persistence.

Provides SQLAlchemy models and the session stores used to load and update
interview sessions.
"""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from hirelytics_interview.db.models import (
    Base,
    ConversationMessageModel,
    JobApplicationModel,
)
from hirelytics_interview.db.repository import (
    InMemorySessionStore,
    SessionStore,
    SqlAlchemySessionStore,
)


def create_session_factory(
    database_url: str,
    echo: bool = False,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """
    Create an async engine and session factory.

    Args:
        database_url: SQLAlchemy async connection string.
        echo: Log emitted SQL.

    Returns:
        Tuple of (engine, session factory).
    """
    engine = create_async_engine(database_url, echo=echo)
    return engine, async_sessionmaker(engine, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """Create all tables that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


__all__ = [
    "Base",
    "ConversationMessageModel",
    "InMemorySessionStore",
    "JobApplicationModel",
    "SessionStore",
    "SqlAlchemySessionStore",
    "create_session_factory",
    "init_db",
]
