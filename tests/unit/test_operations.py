"""insert_if_absent only knows the dialects EduSpark can run on."""

from types import SimpleNamespace

import pytest

from eduspark.database.operations import insert_if_absent
from eduspark.progress.models import UserStreak


def session_for(dialect: str) -> SimpleNamespace:
    return SimpleNamespace(get_bind=lambda: SimpleNamespace(dialect=SimpleNamespace(name=dialect)))


@pytest.mark.asyncio
async def test_unsupported_dialect_is_rejected() -> None:
    with pytest.raises(ValueError, match="'mysql'"):
        await insert_if_absent(session_for("mysql"), UserStreak.__table__, {"user_id": "u1"}, ["user_id", "day"])
