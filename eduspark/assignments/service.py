"""Assignment authoring and the one-submission-per-user tracker."""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from eduspark.config.settings import get_settings
from eduspark.courses.models import Course
from eduspark.database.operations import is_unique_violation
from eduspark.exceptions import (
    DuplicateSubmissionError,
    ResourceNotFoundError,
    StorageFailureError,
    ValidationError,
)
from eduspark.users.models import User

from .models import Assignment, Submission
from .schemas import (
    AssignmentCreate,
    AssignmentSubmissionResponse,
    AssignmentUpdate,
    StudentAssignment,
    TeacherSubmissionView,
)


logger = logging.getLogger(__name__)

GRADE_MIN = 0
GRADE_MAX = 100


class SubmissionTracker:
    """Records at most one submission per (target, user) and lets teachers grade them.

    The same rules apply to assignments and daily challenges; the target and
    submission models are supplied by the caller. The uniqueness guarantee
    comes from the storage constraint on (target, user), not from a prior read.
    """

    def __init__(
        self,
        session: AsyncSession,
        target_model: type[Any],
        submission_model: type[Any],
        *,
        target_type: str,
        target_field: str,
    ) -> None:
        self.session = session
        self.target_model = target_model
        self.submission_model = submission_model
        self.target_type = target_type
        self.target_field = target_field

    async def submit(self, user_id: str, target_id: str, content: str) -> Any:
        min_length = get_settings().SUBMISSION_MIN_LENGTH
        content = content.strip()
        if len(content) < min_length:
            msg = f"Submission must be at least {min_length} characters."
            raise ValidationError(msg, field="content")

        if await self.session.get(self.target_model, target_id) is None:
            raise ResourceNotFoundError(self.target_type.capitalize(), target_id)

        submission = self.submission_model(user_id=user_id, content=content, **{self.target_field: target_id})
        self.session.add(submission)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            if is_unique_violation(e):
                raise DuplicateSubmissionError(self.target_type, target_id) from e
            logger.exception(f"Integrity error storing {self.target_type} submission for user {user_id}")
            msg = "Failed to save submission."
            raise StorageFailureError(msg) from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception(f"Failed to store {self.target_type} submission for user {user_id}")
            msg = "Failed to save submission."
            raise StorageFailureError(msg) from e

        logger.info(f"User {user_id} submitted {self.target_type} {target_id}")
        return submission

    async def get_submission(self, submission_id: str) -> Any:
        submission = await self.session.get(self.submission_model, submission_id)
        if submission is None:
            raise ResourceNotFoundError("Submission", submission_id)
        return submission

    async def get_user_submission(self, user_id: str, target_id: str) -> Any | None:
        result = await self.session.execute(
            select(self.submission_model).where(
                getattr(self.submission_model, self.target_field) == target_id,
                self.submission_model.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def has_submitted(self, user_id: str, target_id: str) -> bool:
        return await self.get_user_submission(user_id, target_id) is not None

    async def grade(self, submission_id: str, grade: int, feedback: str | None) -> Any:
        """Set grade and feedback; regrading overwrites the previous values."""
        if not GRADE_MIN <= grade <= GRADE_MAX:
            msg = f"Grade must be between {GRADE_MIN} and {GRADE_MAX}."
            raise ValidationError(msg, field="grade")

        submission = await self.get_submission(submission_id)
        submission.grade = grade
        submission.feedback = feedback
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception(f"Failed to grade submission {submission_id}")
            msg = "Failed to save grade."
            raise StorageFailureError(msg) from e

        logger.info(f"Graded submission {submission_id}: {grade}")
        return submission


def assignment_tracker(session: AsyncSession) -> SubmissionTracker:
    return SubmissionTracker(
        session,
        Assignment,
        Submission,
        target_type="assignment",
        target_field="assignment_id",
    )


class AssignmentService:
    """Service for assignments and their submissions."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.tracker = assignment_tracker(session)

    async def get_assignment(self, assignment_id: str) -> Assignment:
        assignment = await self.session.get(Assignment, assignment_id)
        if assignment is None:
            raise ResourceNotFoundError("Assignment", assignment_id)
        return assignment

    async def list_assignments(self) -> list[Assignment]:
        result = await self.session.execute(select(Assignment).order_by(Assignment.due_date, Assignment.id))
        return list(result.scalars().all())

    async def create_assignment(self, data: AssignmentCreate) -> Assignment:
        await self._require_course(data.course_id)
        assignment = Assignment(
            title=data.title.strip(),
            problem=data.problem.strip(),
            course_id=data.course_id,
            due_date=data.due_date,
        )
        self.session.add(assignment)
        await self.session.commit()
        logger.info(f"Created assignment {assignment.id} for course {data.course_id}")
        return assignment

    async def update_assignment(self, assignment_id: str, data: AssignmentUpdate) -> Assignment:
        assignment = await self.get_assignment(assignment_id)
        await self._require_course(data.course_id)
        assignment.title = data.title.strip()
        assignment.problem = data.problem.strip()
        assignment.course_id = data.course_id
        assignment.due_date = data.due_date
        await self.session.commit()
        return assignment

    async def list_for_student(self, user_id: str) -> list[StudentAssignment]:
        """Every assignment with the student's status: to_do, submitted or graded."""
        result = await self.session.execute(
            select(Assignment, Course.title, Submission)
            .join(Course, Assignment.course_id == Course.id)
            .outerjoin(
                Submission,
                (Submission.assignment_id == Assignment.id) & (Submission.user_id == user_id),
            )
            .order_by(Assignment.due_date, Assignment.id)
        )

        items = []
        for assignment, course_title, submission in result.all():
            if submission is None:
                status = "to_do"
            elif submission.grade is None:
                status = "submitted"
            else:
                status = "graded"
            items.append(
                StudentAssignment(
                    id=assignment.id,
                    course_id=assignment.course_id,
                    title=assignment.title,
                    problem=assignment.problem,
                    due_date=assignment.due_date,
                    course_title=course_title,
                    status=status,
                    submission=AssignmentSubmissionResponse.model_validate(submission) if submission else None,
                )
            )
        return items

    async def list_submissions(self, assignment_id: str) -> list[TeacherSubmissionView]:
        """Submissions for grading, newest first."""
        await self.get_assignment(assignment_id)
        result = await self.session.execute(
            select(Submission, User.name)
            .join(User, Submission.user_id == User.id)
            .where(Submission.assignment_id == assignment_id)
            .order_by(Submission.submitted_at.desc(), Submission.id)
        )
        return [
            TeacherSubmissionView(
                **AssignmentSubmissionResponse.model_validate(submission).model_dump(),
                student_name=student_name,
            )
            for submission, student_name in result.all()
        ]

    async def _require_course(self, course_id: str) -> None:
        if await self.session.get(Course, course_id) is None:
            raise ResourceNotFoundError("Course", course_id)
