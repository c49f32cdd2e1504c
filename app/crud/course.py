from typing import List, Optional, Tuple
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.core.constants import CourseLanguageEnum, CourseLevelEnum
from app.crud.base import CRUDBase
from app.crud.lesson import lesson as crud_lesson
from app.models.course import Course
from app.models.user import User
from app.schemas.course import CourseCreate, CourseUpdate


class CRUDCourse(CRUDBase[Course, CourseCreate, CourseUpdate]):

    def _query_with_counts(self, db: Session):
        lesson_counts = crud_lesson.published_count_subquery(db)
        return (
            db.query(
                Course,
                User.first_name,
                User.last_name,
                func.coalesce(lesson_counts.c.lesson_count, 0).label("lesson_count"),
            )
            .join(User, User.id == Course.instructor_id)
            .outerjoin(lesson_counts, lesson_counts.c.course_id == Course.id)
        )

    def get_published(self, db: Session, *, id: int) -> Optional[Course]:
        return (
            db.query(Course)
            .filter(Course.id == id)
            .filter(Course.is_published.is_(True))
            .first()
        )

    def get_published_with_counts(self, db: Session, *, id: int) -> Optional[Tuple]:
        return (
            self._query_with_counts(db)
            .filter(Course.id == id)
            .filter(Course.is_published.is_(True))
            .first()
        )

    def get_published_multi(
        self,
        db: Session,
        *,
        language: Optional[CourseLanguageEnum] = None,
        level: Optional[CourseLevelEnum] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Tuple]:
        query = self._query_with_counts(db).filter(Course.is_published.is_(True))
        if language:
            query = query.filter(Course.language == language)
        if level:
            query = query.filter(Course.level == level)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Course.title.ilike(pattern), Course.description.ilike(pattern)))
        return (
            query.order_by(Course.created_at.desc(), Course.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_by_instructor(self, db: Session, *, instructor_id: int) -> List[Tuple]:
        return (
            self._query_with_counts(db)
            .filter(Course.instructor_id == instructor_id)
            .order_by(Course.created_at.desc(), Course.id.desc())
            .all()
        )


course = CRUDCourse(Course)
