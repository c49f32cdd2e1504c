from typing import List
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.lesson import Lesson
from app.schemas.lesson import LessonCreate, LessonUpdate


class CRUDLesson(CRUDBase[Lesson, LessonCreate, LessonUpdate]):

    def _query_counted(self, db: Session):
        # Unpublished lessons are invisible to students and do not count toward progress.
        return db.query(Lesson).filter(Lesson.is_published.is_(True))

    def get_published_by_course(self, db: Session, *, course_id: int) -> List[Lesson]:
        return (
            self._query_counted(db)
            .filter(Lesson.course_id == course_id)
            .order_by(Lesson.order_index)
            .all()
        )

    def count_published_by_course(self, db: Session, *, course_id: int) -> int:
        return self._query_counted(db).filter(Lesson.course_id == course_id).count()

    def published_count_subquery(self, db: Session):
        """Published lesson count per course, for joining into aggregate queries."""
        return (
            db.query(Lesson.course_id.label("course_id"), func.count(Lesson.id).label("lesson_count"))
            .filter(Lesson.is_published.is_(True))
            .group_by(Lesson.course_id)
            .subquery()
        )


lesson = CRUDLesson(Lesson)
