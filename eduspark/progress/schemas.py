"""Schemas for progress API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class NextLessonRecommendation(BaseModel):
    """Oracle output: a lesson to continue with, or only the reasoning when none fits."""

    lesson_id: str | None = None
    course_id: str | None = None
    reasoning: str = ""


class LessonCompletion(BaseModel):
    """Result of completing a lesson."""

    lesson_id: str
    course_id: str
    xp_awarded: int
    already_completed: bool
    new_badge_ids: list[str] = Field(default_factory=list)
    current_streak: int


class LessonCompletionResponse(LessonCompletion):
    recommendation: NextLessonRecommendation | None = None


class QuestionAnswerRequest(BaseModel):
    answer: str = Field(..., max_length=2000)


class QuestionAnswerResult(BaseModel):
    question_id: str
    is_correct: bool
    correct_answer: str


class BadgeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str
    icon: str | None = None
    course_id: str | None = None


class EarnedBadge(BadgeResponse):
    earned_at: datetime


class StudentStats(BaseModel):
    total_xp: int
    current_streak: int
    completed_lessons: int
    badges: list[EarnedBadge]


class OutlineLesson(BaseModel):
    id: str
    title: str
    xp: int
    completed: bool
    unlocked: bool


class OutlineTopic(BaseModel):
    id: str
    title: str
    lessons: list[OutlineLesson]


class CourseOutline(BaseModel):
    """A course's topics and lessons in authored order, with the caller's progress."""

    id: str
    title: str
    description: str
    topics: list[OutlineTopic]
    completed_lessons: int
    total_lessons: int
