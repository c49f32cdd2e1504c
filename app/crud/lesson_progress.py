from typing import Optional
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.lesson import Lesson
from app.models.lesson_progress import LessonProgress
from app.schemas.lesson_progress import LessonProgressCreate, LessonProgressUpdate


class CRUDLessonProgress(CRUDBase[LessonProgress, LessonProgressCreate, LessonProgressUpdate]):

    def get_by_user_and_lesson(self, db: Session, *, user_id: int, lesson_id: int) -> Optional[LessonProgress]:
        return (
            db.query(LessonProgress)
            .filter(LessonProgress.user_id == user_id)
            .filter(LessonProgress.lesson_id == lesson_id)
            .first()
        )

    def count_completed_for_course(self, db: Session, *, user_id: int, course_id: int) -> int:
        return (
            db.query(func.count(LessonProgress.id))
            .join(Lesson, Lesson.id == LessonProgress.lesson_id)
            .filter(LessonProgress.user_id == user_id)
            .filter(LessonProgress.is_completed.is_(True))
            .filter(Lesson.course_id == course_id)
            .filter(Lesson.is_published.is_(True))
            .scalar()
        ) or 0

    def completed_count_subquery(self, db: Session, *, user_id: int):
        """Completed published lessons per course for one user."""
        return (
            db.query(Lesson.course_id.label("course_id"), func.count(LessonProgress.id).label("completed_count"))
            .select_from(LessonProgress)
            .join(Lesson, Lesson.id == LessonProgress.lesson_id)
            .filter(LessonProgress.user_id == user_id)
            .filter(LessonProgress.is_completed.is_(True))
            .filter(Lesson.is_published.is_(True))
            .group_by(Lesson.course_id)
            .subquery()
        )

    def delete_for_course(self, db: Session, *, user_id: int, course_id: int) -> int:
        """Remove every progress row the user has for lessons of the course.

        Flushes only; the caller owns the transaction.
        """
        lesson_ids = select(Lesson.id).where(Lesson.course_id == course_id)
        return (
            db.query(LessonProgress)
            .filter(LessonProgress.user_id == user_id)
            .filter(LessonProgress.lesson_id.in_(lesson_ids))
            .delete(synchronize_session=False)
        )


lesson_progress = CRUDLessonProgress(LessonProgress)
