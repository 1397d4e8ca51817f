"""Schemas for assignments and submissions."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


AssignmentStatus = Literal["to_do", "submitted", "graded"]


class AssignmentCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=255)
    problem: str = Field(..., min_length=10)
    course_id: str
    due_date: datetime


class AssignmentUpdate(AssignmentCreate):
    pass


class AssignmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    course_id: str
    title: str
    problem: str
    due_date: datetime


class SubmissionCreate(BaseModel):
    # Length policy is enforced by the tracker so the error is a domain ValidationError
    content: str = Field(..., max_length=20000)


class GradeRequest(BaseModel):
    grade: int
    feedback: str = Field(default="", max_length=5000)


class SubmissionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    content: str
    submitted_at: datetime
    grade: int | None = None
    feedback: str | None = None


class AssignmentSubmissionResponse(SubmissionResponse):
    assignment_id: str


class TeacherSubmissionView(AssignmentSubmissionResponse):
    """A submission listed for grading, with the student's name."""

    student_name: str


class StudentAssignment(AssignmentResponse):
    course_title: str
    status: AssignmentStatus
    submission: AssignmentSubmissionResponse | None = None
