from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.crud.lesson import lesson as crud_lesson
from app.crud.lesson_progress import lesson_progress as crud_lesson_progress
from app.models.course import Course
from app.models.enrollment import Enrollment
from app.models.user import User
from app.schemas.enrollment import EnrollmentCreate, EnrollmentUpdate


class CRUDEnrollment(CRUDBase[Enrollment, EnrollmentCreate, EnrollmentUpdate]):

    def get_by_user_and_course(self, db: Session, *, user_id: int, course_id: int) -> Optional[Enrollment]:
        return (
            db.query(Enrollment)
            .filter(Enrollment.user_id == user_id)
            .filter(Enrollment.course_id == course_id)
            .first()
        )

    def exists(self, db: Session, *, user_id: int, course_id: int) -> bool:
        return db.query(
            db.query(Enrollment.id)
            .filter(Enrollment.user_id == user_id)
            .filter(Enrollment.course_id == course_id)
            .exists()
        ).scalar()

    def get_summaries_by_user(self, db: Session, *, user_id: int) -> List:
        """Every enrollment of the user joined with its course, instructor and
        lesson/completion counts, in a single statement."""
        lesson_counts = crud_lesson.published_count_subquery(db)
        completed_counts = crud_lesson_progress.completed_count_subquery(db, user_id=user_id)
        return (
            db.query(
                Enrollment,
                Course,
                User.first_name.label("instructor_first_name"),
                User.last_name.label("instructor_last_name"),
                func.coalesce(lesson_counts.c.lesson_count, 0).label("total_lessons"),
                func.coalesce(completed_counts.c.completed_count, 0).label("completed_lessons"),
            )
            .join(Course, Course.id == Enrollment.course_id)
            .join(User, User.id == Course.instructor_id)
            .outerjoin(lesson_counts, lesson_counts.c.course_id == Course.id)
            .outerjoin(completed_counts, completed_counts.c.course_id == Course.id)
            .filter(Enrollment.user_id == user_id)
            .order_by(Enrollment.enrolled_at.desc(), Enrollment.id.desc())
            .all()
        )


enrollment = CRUDEnrollment(Enrollment)
