"""Request/response schemas for courses, topics and lessons."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from eduspark.progress.schemas import NextLessonRecommendation


class CourseCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=200)
    description: str = Field(..., min_length=10)


class CourseUpdate(CourseCreate):
    pass


class TopicCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=200)


class TopicUpdate(TopicCreate):
    pass


class LessonCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=255)
    xp: int = Field(default=0, ge=0)


class LessonStepInput(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = ""
    image: str | None = None
    video_url: str | None = None


class QuestionInput(BaseModel):
    text: str = Field(..., min_length=1)
    type: Literal["multiple-choice", "fill-in-the-blank"]
    options: list[str] = Field(default_factory=list)
    correct_answer: str
    hint: str = ""
    image: str | None = None

    @model_validator(mode="after")
    def _clear_options_for_blanks(self) -> "QuestionInput":
        if self.type == "fill-in-the-blank":
            self.options = []
        return self


class LessonContentUpdate(BaseModel):
    """Full replacement of a lesson's editable fields, steps and questions."""

    title: str = Field(..., min_length=1, max_length=255)
    xp: int = Field(..., ge=0)
    steps: list[LessonStepInput] = Field(default_factory=list)
    questions: list[QuestionInput] = Field(default_factory=list)


class CourseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str


class TopicResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    course_id: str
    title: str
    position: int


class LessonResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    course_id: str
    topic_id: str
    title: str
    xp: int
    position: int


class LessonStepResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    content: str
    image: str | None = None
    video_url: str | None = None
    position: int


class QuestionResponse(BaseModel):
    """Quiz question as shown to learners; the answer is checked server-side."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    text: str
    type: str
    options: list[str]
    hint: str
    image: str | None = None
    position: int


class QuestionWithAnswerResponse(QuestionResponse):
    correct_answer: str


class LessonDetail(LessonResponse):
    steps: list[LessonStepResponse]
    questions: list[QuestionResponse]
    completed: bool = False
    unlocked: bool = True
    recommendation: NextLessonRecommendation | None = None


class LessonEditorDetail(LessonResponse):
    """Teacher view of a lesson, including answers."""

    steps: list[LessonStepResponse]
    questions: list[QuestionWithAnswerResponse]
