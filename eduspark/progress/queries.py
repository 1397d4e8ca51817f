"""SQL queries for progress tracking."""

# Course-linked badges the user qualifies for: at least one completed lesson in the badge's course
ELIGIBLE_COURSE_BADGES_QUERY = """
    SELECT DISTINCT b.id
    FROM badges b
    JOIN lessons l ON l.course_id = b.course_id
    JOIN user_progress up ON up.lesson_id = l.id
    WHERE up.user_id = :user_id
    ORDER BY b.id
"""

USER_TOTALS_QUERY = """
    SELECT
        COALESCE(SUM(xp_earned), 0) AS total_xp,
        COUNT(*) AS completed_lessons
    FROM user_progress
    WHERE user_id = :user_id
"""
