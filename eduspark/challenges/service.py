"""Daily challenge: latest challenge, discussion and solutions."""

import logging
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eduspark.assignments.service import SubmissionTracker
from eduspark.config.settings import get_settings
from eduspark.exceptions import ResourceNotFoundError, ValidationError
from eduspark.users.models import User

from .models import Challenge, ChallengeComment, ChallengeSubmission
from .schemas import ChallengeCreate, ChallengeResponse, CommentResponse, DailyChallengeView


logger = logging.getLogger(__name__)


def challenge_tracker(session: AsyncSession) -> SubmissionTracker:
    return SubmissionTracker(
        session,
        Challenge,
        ChallengeSubmission,
        target_type="challenge",
        target_field="challenge_id",
    )


class ChallengeService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.tracker = challenge_tracker(session)

    async def get_latest_challenge(self) -> Challenge | None:
        result = await self.session.execute(
            select(Challenge).order_by(Challenge.day.desc(), Challenge.id.desc()).limit(1)
        )
        return result.scalar_one_or_none()

    async def get_challenge(self, challenge_id: str) -> Challenge:
        challenge = await self.session.get(Challenge, challenge_id)
        if challenge is None:
            raise ResourceNotFoundError("Challenge", challenge_id)
        return challenge

    async def create_challenge(self, data: ChallengeCreate) -> Challenge:
        challenge = Challenge(
            title=data.title.strip(),
            problem=data.problem.strip(),
            topic=data.topic.strip(),
            day=data.day or datetime.now(UTC).date(),
        )
        self.session.add(challenge)
        await self.session.commit()
        logger.info(f"Published challenge {challenge.id} for {challenge.day}")
        return challenge

    async def list_comments(self, challenge_id: str) -> list[CommentResponse]:
        """Comments newest first, with the author's name and avatar."""
        result = await self.session.execute(
            select(ChallengeComment, User.name, User.avatar_url)
            .join(User, ChallengeComment.user_id == User.id)
            .where(ChallengeComment.challenge_id == challenge_id)
            .order_by(ChallengeComment.created_at.desc(), ChallengeComment.id)
        )
        return [
            CommentResponse(
                id=comment.id,
                challenge_id=comment.challenge_id,
                comment=comment.comment,
                created_at=comment.created_at,
                user_name=user_name,
                user_avatar_url=avatar_url,
            )
            for comment, user_name, avatar_url in result.all()
        ]

    async def post_comment(self, user_id: str, challenge_id: str, comment: str) -> ChallengeComment:
        min_length = get_settings().COMMENT_MIN_LENGTH
        comment = comment.strip()
        if len(comment) < min_length:
            msg = f"Comment must be at least {min_length} characters."
            raise ValidationError(msg, field="comment")

        await self.get_challenge(challenge_id)
        entry = ChallengeComment(challenge_id=challenge_id, user_id=user_id, comment=comment)
        self.session.add(entry)
        await self.session.commit()
        return entry

    async def get_daily_view(self, user_id: str) -> DailyChallengeView | None:
        """The latest challenge with comments and the caller's submission flag, or None if none exist."""
        challenge = await self.get_latest_challenge()
        if challenge is None:
            return None

        return DailyChallengeView(
            challenge=ChallengeResponse.model_validate(challenge),
            comments=await self.list_comments(challenge.id),
            has_submitted=await self.tracker.has_submitted(user_id, challenge.id),
        )
