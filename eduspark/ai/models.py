"""Pydantic models for AI inputs (analytics context) and structured outputs."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TutorHint(BaseModel):
    hint_text: str = Field(description="A concise Socratic hint that does not reveal the answer")


class PersonalizedChallenge(BaseModel):
    title: str = Field(description="A short, catchy title for the challenge")
    problem: str = Field(description="The full text of the challenge; a word problem or conceptual question")
    topic: str = Field(description="The general STEM topic, e.g. 'Algebra', 'Biology', 'Physics'")


class GeneratedLessonStep(BaseModel):
    title: str = Field(description="The title of this learning step")
    content: str = Field(description="The detailed content for this learning step")

    model_config = ConfigDict(extra="forbid")


class GeneratedQuestion(BaseModel):
    """Quiz question as produced by the model.

    Multiple-choice answers must be one of the options; fill-in-the-blank
    questions carry no options.
    """

    text: str = Field(description="The text of the quiz question")
    type: Literal["multiple-choice", "fill-in-the-blank"] = Field(description="The type of the question")
    options: list[str] = Field(default_factory=list, description="Possible answers; empty for fill-in-the-blank")
    correct_answer: str = Field(description="The correct answer to the question")
    hint: str = Field(description="A helpful hint for the student")

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def _check_options(self) -> "GeneratedQuestion":
        if self.type == "fill-in-the-blank":
            self.options = []
        elif self.correct_answer not in self.options:
            msg = "correct_answer must be one of the options for multiple-choice questions"
            raise ValueError(msg)
        return self


class GeneratedLessonContent(BaseModel):
    steps: list[GeneratedLessonStep] = Field(description="3-4 learning steps")
    questions: list[GeneratedQuestion] = Field(description="3-5 quiz questions mixing both types")


class ClassroomInsights(BaseModel):
    insights: list[str] = Field(description="2-4 brief, actionable and encouraging insights for the teacher")


# Analytics used as prompt context


class TopicPerformance(BaseModel):
    topic_title: str
    correct_percentage: float = Field(ge=0, le=100)
    total_questions: int


class AvailableLesson(BaseModel):
    id: str
    title: str
    course_id: str
    topic_title: str


class StudentStreak(BaseModel):
    student_name: str
    streak_days: int


class LessonCompletionStats(BaseModel):
    most_completed: list[str] = Field(default_factory=list)
    least_completed: list[str] = Field(default_factory=list)


class ClassroomAnalytics(BaseModel):
    top_streaks: list[StudentStreak] = Field(default_factory=list)
    zero_progress_students: list[str] = Field(default_factory=list)
    lesson_completion_stats: LessonCompletionStats = Field(default_factory=LessonCompletionStats)
