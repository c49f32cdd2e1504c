import logging
from datetime import datetime, timezone
from typing import Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.database import atomic
from app.core.exceptions import ConflictError, NotFoundError, ValidationFailedError
from app.crud.course import course as crud_course
from app.crud.enrollment import enrollment as crud_enrollment
from app.crud.lesson import lesson as crud_lesson
from app.crud.lesson_progress import lesson_progress as crud_lesson_progress
from app.models.lesson import Lesson
from app.models.lesson_progress import LessonProgress
from app.schemas.enrollment import CourseProgress
from app.services.enrollment import enrollment_service

logger = logging.getLogger(__name__)


class LessonProgressService:

    def _get_lesson_for_enrolled_user(self, db: Session, lesson_id: int, user_id: int) -> Lesson:
        lesson = crud_lesson.get(db, id=lesson_id)
        if not lesson or not lesson.is_published:
            raise NotFoundError("Lesson not found.")

        if not crud_course.get_published(db, id=lesson.course_id):
            raise NotFoundError("Lesson not found.")

        if not crud_enrollment.exists(db, user_id=user_id, course_id=lesson.course_id):
            raise NotFoundError("You are not enrolled in this course.")

        return lesson

    def _get_or_create_progress(self, db: Session, lesson_id: int, user_id: int) -> Tuple[LessonProgress, bool]:
        progress = crud_lesson_progress.get_by_user_and_lesson(db, user_id=user_id, lesson_id=lesson_id)
        if progress:
            return progress, False
        progress = LessonProgress(user_id=user_id, lesson_id=lesson_id, is_completed=False, watched_seconds=0)
        db.add(progress)
        return progress, True

    def _save(self, db: Session, progress: LessonProgress) -> None:
        try:
            with atomic(db):
                db.add(progress)
        except IntegrityError:
            raise ConflictError("Lesson progress was updated concurrently, please retry.")

    def complete_lesson(self, db: Session, lesson_id: int, user_id: int) -> CourseProgress:
        lesson = self._get_lesson_for_enrolled_user(db, lesson_id, user_id)
        progress, _ = self._get_or_create_progress(db, lesson_id, user_id)

        if not progress.is_completed:
            progress.is_completed = True
            progress.completed_at = datetime.now(timezone.utc)
            self._save(db, progress)
            logger.info(f"User {user_id} completed lesson {lesson_id}")

        return enrollment_service.refresh_progress(db, course_id=lesson.course_id, user_id=user_id)

    def record_watch_time(self, db: Session, lesson_id: int, user_id: int, watched_seconds: int) -> LessonProgress:
        if watched_seconds < 0:
            raise ValidationFailedError("Watched seconds cannot be negative.")

        self._get_lesson_for_enrolled_user(db, lesson_id, user_id)
        progress, created = self._get_or_create_progress(db, lesson_id, user_id)

        if created or watched_seconds > (progress.watched_seconds or 0):
            progress.watched_seconds = max(watched_seconds, progress.watched_seconds or 0)
            self._save(db, progress)
            db.refresh(progress)

        return progress


lesson_progress_service = LessonProgressService()
