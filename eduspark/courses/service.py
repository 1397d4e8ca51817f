"""Course authoring and lesson lookup."""

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from eduspark.exceptions import ResourceNotFoundError, StorageFailureError

from .models import Course, Lesson, LessonStep, Question, Topic
from .schemas import CourseCreate, CourseUpdate, LessonContentUpdate, LessonCreate, TopicCreate, TopicUpdate


logger = logging.getLogger(__name__)


class CourseService:
    """Service for courses, topics and lessons."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_courses(self) -> list[Course]:
        result = await self.session.execute(select(Course).order_by(Course.title, Course.id))
        return list(result.scalars().all())

    async def get_course(self, course_id: str) -> Course:
        course = await self.session.get(Course, course_id)
        if course is None:
            raise ResourceNotFoundError("Course", course_id)
        return course

    async def create_course(self, data: CourseCreate, course_id: str | None = None) -> Course:
        course = Course(title=data.title.strip(), description=data.description.strip())
        if course_id:
            course.id = course_id
        self.session.add(course)
        await self.session.commit()
        logger.info(f"Created course {course.id}")
        return course

    async def update_course(self, course_id: str, data: CourseUpdate) -> Course:
        course = await self.get_course(course_id)
        course.title = data.title.strip()
        course.description = data.description.strip()
        await self.session.commit()
        return course

    async def get_topic(self, topic_id: str) -> Topic:
        topic = await self.session.get(Topic, topic_id)
        if topic is None:
            raise ResourceNotFoundError("Topic", topic_id)
        return topic

    async def create_topic(self, course_id: str, data: TopicCreate) -> Topic:
        """Append a topic at the end of the course."""
        await self.get_course(course_id)
        next_position = await self.session.scalar(
            select(func.coalesce(func.max(Topic.position) + 1, 0)).where(Topic.course_id == course_id)
        )
        topic = Topic(course_id=course_id, title=data.title.strip(), position=next_position)
        self.session.add(topic)
        await self.session.commit()
        return topic

    async def update_topic(self, topic_id: str, data: TopicUpdate) -> Topic:
        topic = await self.get_topic(topic_id)
        topic.title = data.title.strip()
        await self.session.commit()
        return topic

    async def create_lesson(self, topic_id: str, data: LessonCreate) -> Lesson:
        """Append a lesson at the end of a topic; the course comes from the topic."""
        topic = await self.get_topic(topic_id)
        next_position = await self.session.scalar(
            select(func.coalesce(func.max(Lesson.position) + 1, 0)).where(Lesson.topic_id == topic_id)
        )
        lesson = Lesson(
            course_id=topic.course_id,
            topic_id=topic.id,
            title=data.title.strip(),
            xp=data.xp,
            position=next_position,
        )
        self.session.add(lesson)
        await self.session.commit()
        logger.info(f"Created lesson {lesson.id} in topic {topic_id}")
        return lesson

    async def get_lesson(self, lesson_id: str) -> Lesson:
        """Lesson with its steps and questions loaded."""
        result = await self.session.execute(
            select(Lesson)
            .where(Lesson.id == lesson_id)
            .options(selectinload(Lesson.steps), selectinload(Lesson.questions))
        )
        lesson = result.scalar_one_or_none()
        if lesson is None:
            raise ResourceNotFoundError("Lesson", lesson_id)
        return lesson

    async def replace_lesson_content(self, lesson_id: str, data: LessonContentUpdate) -> Lesson:
        """Overwrite title, xp, steps and questions of a lesson in one transaction."""
        lesson = await self.get_lesson(lesson_id)

        try:
            lesson.title = data.title.strip()
            lesson.xp = data.xp
            lesson.steps = [
                LessonStep(
                    title=step.title,
                    content=step.content,
                    image=step.image,
                    video_url=step.video_url,
                    position=position,
                )
                for position, step in enumerate(data.steps)
            ]
            lesson.questions = [
                Question(
                    text=question.text,
                    type=question.type,
                    options=list(question.options),
                    correct_answer=question.correct_answer,
                    hint=question.hint,
                    image=question.image,
                    position=position,
                )
                for position, question in enumerate(data.questions)
            ]
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception(f"Failed to update lesson {lesson_id}")
            msg = "Failed to update lesson."
            raise StorageFailureError(msg) from e

        logger.info(f"Updated lesson {lesson_id}: {len(data.steps)} steps, {len(data.questions)} questions")
        return lesson
