from .base import Base, create_all_tables, generate_id
from .engine import create_app_engine
from .operations import insert_if_absent, is_unique_violation
from .session import Database, DbSession, get_database, get_db_session


__all__ = [
    "Base",
    "Database",
    "DbSession",
    "create_all_tables",
    "create_app_engine",
    "generate_id",
    "get_database",
    "get_db_session",
    "insert_if_absent",
    "is_unique_violation",
]
