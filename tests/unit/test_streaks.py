"""Pure progression rules: consecutive-day streaks and lesson unlocking."""

from datetime import date, timedelta

from eduspark.progress.streaks import compute_current_streak, is_lesson_unlocked


TODAY = date(2024, 7, 29)


def days_ago(*offsets: int) -> list[date]:
    return [TODAY - timedelta(days=offset) for offset in offsets]


class TestComputeCurrentStreak:
    def test_empty_history_is_zero(self) -> None:
        assert compute_current_streak([], today=TODAY) == 0

    def test_counts_consecutive_days_ending_today(self) -> None:
        assert compute_current_streak(days_ago(0, 1, 2), today=TODAY) == 3

    def test_streak_survives_until_end_of_next_day(self) -> None:
        # Nothing yet today, but yesterday and the day before count
        assert compute_current_streak(days_ago(1, 2), today=TODAY) == 2

    def test_gap_breaks_the_streak(self) -> None:
        assert compute_current_streak(days_ago(0, 1, 3, 4, 5), today=TODAY) == 2

    def test_last_activity_two_days_ago_is_zero(self) -> None:
        assert compute_current_streak(days_ago(2, 3), today=TODAY) == 0

    def test_duplicate_days_count_once(self) -> None:
        assert compute_current_streak([TODAY, TODAY, TODAY - timedelta(days=1)], today=TODAY) == 2

    def test_history_in_any_order(self) -> None:
        assert compute_current_streak(days_ago(2, 0, 1), today=TODAY) == 3


class TestIsLessonUnlocked:
    ORDER = ["m1", "m2", "m3"]

    def test_first_lesson_is_always_unlocked(self) -> None:
        assert is_lesson_unlocked("m1", self.ORDER, set())

    def test_locked_until_previous_lesson_completed(self) -> None:
        assert not is_lesson_unlocked("m2", self.ORDER, set())
        assert is_lesson_unlocked("m2", self.ORDER, {"m1"})

    def test_only_the_immediately_previous_lesson_matters(self) -> None:
        assert not is_lesson_unlocked("m3", self.ORDER, {"m1"})
        assert is_lesson_unlocked("m3", self.ORDER, {"m2"})

    def test_unknown_lesson_is_locked(self) -> None:
        assert not is_lesson_unlocked("s1", self.ORDER, {"m1", "m2", "m3"})
