"""Assignment API endpoints."""

from fastapi import APIRouter, status

from eduspark.auth import CurrentAuth, TeacherAuth

from .schemas import (
    AssignmentCreate,
    AssignmentResponse,
    AssignmentSubmissionResponse,
    AssignmentUpdate,
    GradeRequest,
    StudentAssignment,
    SubmissionCreate,
    TeacherSubmissionView,
)
from .service import AssignmentService


router = APIRouter(prefix="/api/v1/assignments", tags=["assignments"])


@router.get("")
async def list_my_assignments(auth: CurrentAuth) -> list[StudentAssignment]:
    return await AssignmentService(auth.session).list_for_student(auth.user_id)


@router.get("/manage")
async def list_assignments(auth: TeacherAuth) -> list[AssignmentResponse]:
    assignments = await AssignmentService(auth.session).list_assignments()
    return [AssignmentResponse.model_validate(assignment) for assignment in assignments]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_assignment(data: AssignmentCreate, auth: TeacherAuth) -> AssignmentResponse:
    assignment = await AssignmentService(auth.session).create_assignment(data)
    return AssignmentResponse.model_validate(assignment)


@router.get("/{assignment_id}")
async def get_assignment(assignment_id: str, auth: CurrentAuth) -> AssignmentResponse:
    assignment = await AssignmentService(auth.session).get_assignment(assignment_id)
    return AssignmentResponse.model_validate(assignment)


@router.put("/{assignment_id}")
async def update_assignment(assignment_id: str, data: AssignmentUpdate, auth: TeacherAuth) -> AssignmentResponse:
    assignment = await AssignmentService(auth.session).update_assignment(assignment_id, data)
    return AssignmentResponse.model_validate(assignment)


@router.post("/{assignment_id}/submissions", status_code=status.HTTP_201_CREATED)
async def submit_assignment(
    assignment_id: str,
    data: SubmissionCreate,
    auth: CurrentAuth,
) -> AssignmentSubmissionResponse:
    """Submit an answer; a second submission by the same student is rejected with 409."""
    submission = await AssignmentService(auth.session).tracker.submit(auth.user_id, assignment_id, data.content)
    return AssignmentSubmissionResponse.model_validate(submission)


@router.get("/{assignment_id}/submissions/mine")
async def get_my_submission(assignment_id: str, auth: CurrentAuth) -> AssignmentSubmissionResponse | None:
    service = AssignmentService(auth.session)
    await service.get_assignment(assignment_id)
    submission = await service.tracker.get_user_submission(auth.user_id, assignment_id)
    return AssignmentSubmissionResponse.model_validate(submission) if submission else None


@router.get("/{assignment_id}/submissions")
async def list_submissions(assignment_id: str, auth: TeacherAuth) -> list[TeacherSubmissionView]:
    return await AssignmentService(auth.session).list_submissions(assignment_id)


@router.put("/submissions/{submission_id}/grade")
async def grade_submission(submission_id: str, data: GradeRequest, auth: TeacherAuth) -> AssignmentSubmissionResponse:
    submission = await AssignmentService(auth.session).tracker.grade(submission_id, data.grade, data.feedback)
    return AssignmentSubmissionResponse.model_validate(submission)
