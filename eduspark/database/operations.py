"""Storage primitives shared by the services: insert-if-absent and constraint detection."""

from collections.abc import Mapping, Sequence
from typing import Any

from psycopg.errors import UniqueViolation
from sqlalchemy import Table
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession


_INSERT_BY_DIALECT = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


async def insert_if_absent(
    session: AsyncSession,
    table: Table,
    values: Mapping[str, Any],
    conflict_columns: Sequence[str],
) -> bool:
    """Insert a row unless one with the same unique key exists.

    Runs ``INSERT ... ON CONFLICT (...) DO NOTHING`` inside the caller's
    transaction. Returns True when a row was written, False when the key
    already existed.
    """
    dialect = session.get_bind().dialect.name
    insert_factory = _INSERT_BY_DIALECT.get(dialect)
    if insert_factory is None:
        msg = f"insert_if_absent is not supported for dialect {dialect!r}"
        raise ValueError(msg)

    stmt = insert_factory(table).values(**values).on_conflict_do_nothing(index_elements=list(conflict_columns))
    result = await session.execute(stmt)
    return bool(result.rowcount)


def is_unique_violation(exc: IntegrityError) -> bool:
    """Tell a unique-constraint violation apart from other integrity failures."""
    orig = getattr(exc, "orig", None)
    if isinstance(orig, UniqueViolation):
        return True
    message = str(orig if orig is not None else exc).lower()
    # SQLite: "UNIQUE constraint failed: ...", PostgreSQL: "duplicate key value violates unique constraint"
    return "unique constraint" in message or "duplicate key" in message
