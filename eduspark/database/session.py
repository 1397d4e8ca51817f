from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from .engine import create_app_engine


class Database:
    """Explicitly constructed storage handle: one engine plus its session factory.

    The application builds one instance at startup and stores it on
    ``app.state.database``; tests build their own against an in-memory engine.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self.session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    @classmethod
    def from_url(cls, database_url: str, *, echo: bool = False) -> "Database":
        return cls(create_app_engine(database_url, echo=echo))

    def session(self) -> AsyncSession:
        return self.session_maker()

    async def dispose(self) -> None:
        await self.engine.dispose()


def get_database(request: Request) -> Database:
    """Return the storage handle attached to the running application."""
    return request.app.state.database


async def get_db_session(
    database: Annotated[Database, Depends(get_database)],
) -> AsyncGenerator[AsyncSession, None]:
    """Get an async database session generator.

    Yields
    ------
        AsyncSession: Database session without automatic commit.
        The service layer should handle commits/rollbacks.
    """
    async with database.session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


# Create a reusable dependency
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
