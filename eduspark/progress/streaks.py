"""Pure progression rules: current streak and lesson unlocking."""

from collections.abc import Iterable, Sequence
from datetime import UTC, date, datetime, timedelta


def utc_today() -> date:
    return datetime.now(UTC).date()


def compute_current_streak(streak_dates: Iterable[date], today: date | None = None) -> int:
    """Count consecutive days with activity ending today.

    If there is no entry for ``today`` the walk starts from yesterday, so a
    streak stays alive until the end of the day after the last completion.
    Gaps end the streak; an empty history gives 0.
    """
    days = set(streak_dates)
    if not days:
        return 0

    cursor = today or utc_today()
    if cursor not in days:
        cursor -= timedelta(days=1)

    streak = 0
    while cursor in days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def is_lesson_unlocked(
    lesson_id: str,
    ordered_lesson_ids: Sequence[str],
    completed_lesson_ids: Iterable[str],
) -> bool:
    """A lesson is open if it comes first, or the lesson just before it is completed.

    Lessons absent from ``ordered_lesson_ids`` are never unlocked.
    """
    try:
        index = ordered_lesson_ids.index(lesson_id)
    except ValueError:
        return False

    if index == 0:
        return True
    return ordered_lesson_ids[index - 1] in set(completed_lesson_ids)
