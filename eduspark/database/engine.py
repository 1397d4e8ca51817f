from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool


def create_app_engine(database_url: str, *, echo: bool = False) -> AsyncEngine:
    """Create the async engine for PostgreSQL (psycopg) or SQLite (aiosqlite).

    - PostgreSQL: standard pool with pre-ping.
    - SQLite file: default pool, connections shared across the event loop.
    - SQLite in-memory: a single static connection so every session sees the same database.
    """
    if database_url.startswith("sqlite"):
        engine_kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if make_url(database_url).database in (None, "", ":memory:"):
            engine_kwargs["poolclass"] = StaticPool
        return create_async_engine(database_url, echo=echo, **engine_kwargs)

    return create_async_engine(
        database_url,
        echo=echo,
        pool_size=10,
        max_overflow=10,
        pool_recycle=3600,  # ~1h
        pool_pre_ping=True,
        pool_use_lifo=True,
        connect_args={"connect_timeout": 10},
    )
