"""Daily challenge API endpoints."""

from fastapi import APIRouter, status

from eduspark.assignments.schemas import GradeRequest
from eduspark.auth import CurrentAuth, TeacherAuth

from .schemas import (
    ChallengeCreate,
    ChallengeResponse,
    ChallengeSubmissionResponse,
    CommentCreate,
    CommentResponse,
    DailyChallengeView,
    SolutionCreate,
)
from .service import ChallengeService


router = APIRouter(prefix="/api/v1/challenges", tags=["challenges"])


@router.get("/today")
async def get_daily_challenge(auth: CurrentAuth) -> DailyChallengeView | None:
    """Latest challenge, or null when none has been published."""
    return await ChallengeService(auth.session).get_daily_view(auth.user_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_challenge(data: ChallengeCreate, auth: TeacherAuth) -> ChallengeResponse:
    challenge = await ChallengeService(auth.session).create_challenge(data)
    return ChallengeResponse.model_validate(challenge)


@router.get("/{challenge_id}/comments")
async def list_comments(challenge_id: str, auth: CurrentAuth) -> list[CommentResponse]:
    service = ChallengeService(auth.session)
    await service.get_challenge(challenge_id)
    return await service.list_comments(challenge_id)


@router.post("/{challenge_id}/comments", status_code=status.HTTP_201_CREATED)
async def post_comment(challenge_id: str, data: CommentCreate, auth: CurrentAuth) -> CommentResponse:
    entry = await ChallengeService(auth.session).post_comment(auth.user_id, challenge_id, data.comment)
    return CommentResponse(
        id=entry.id,
        challenge_id=entry.challenge_id,
        comment=entry.comment,
        created_at=entry.created_at,
        user_name=auth.user.name,
        user_avatar_url=auth.user.avatar_url,
    )


@router.post("/{challenge_id}/submissions", status_code=status.HTTP_201_CREATED)
async def submit_solution(challenge_id: str, data: SolutionCreate, auth: CurrentAuth) -> ChallengeSubmissionResponse:
    submission = await ChallengeService(auth.session).tracker.submit(auth.user_id, challenge_id, data.content)
    return ChallengeSubmissionResponse.model_validate(submission)


@router.put("/submissions/{submission_id}/grade")
async def grade_solution(submission_id: str, data: GradeRequest, auth: TeacherAuth) -> ChallengeSubmissionResponse:
    submission = await ChallengeService(auth.session).tracker.grade(submission_id, data.grade, data.feedback)
    return ChallengeSubmissionResponse.model_validate(submission)
