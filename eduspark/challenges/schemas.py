"""Schemas for the daily challenge."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


class ChallengeCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=255)
    problem: str = Field(..., min_length=10)
    topic: str = Field(..., min_length=1, max_length=100)
    day: date | None = None


class ChallengeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    problem: str
    topic: str
    day: date


class CommentCreate(BaseModel):
    comment: str = Field(..., max_length=2000)


class CommentResponse(BaseModel):
    id: str
    challenge_id: str
    comment: str
    created_at: datetime
    user_name: str
    user_avatar_url: str | None = None


class SolutionCreate(BaseModel):
    content: str = Field(..., max_length=20000)


class ChallengeSubmissionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    challenge_id: str
    user_id: str
    content: str
    submitted_at: datetime
    grade: int | None = None
    feedback: str | None = None


class DailyChallengeView(BaseModel):
    """Today's challenge page: the challenge, its discussion and whether the caller answered."""

    challenge: ChallengeResponse
    comments: list[CommentResponse]
    has_submitted: bool
