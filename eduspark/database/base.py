from uuid import uuid4

from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all database models."""


async def create_all_tables(engine: AsyncEngine) -> None:
    """Create all tables in the database."""
    # Model modules register themselves on Base.metadata when imported
    from eduspark.models import register_models

    register_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def generate_id(prefix: str | None = None) -> str:
    """Return a new opaque string identifier, optionally prefixed (``lesson_<uuid>``)."""
    value = str(uuid4())
    return f"{prefix}_{value}" if prefix else value
