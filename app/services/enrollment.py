import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.database import atomic
from app.core.exceptions import ConflictError, NotFoundError
from app.crud.course import course as crud_course
from app.crud.enrollment import enrollment as crud_enrollment
from app.crud.lesson import lesson as crud_lesson
from app.crud.lesson_progress import lesson_progress as crud_lesson_progress
from app.models.course import Course
from app.models.enrollment import Enrollment
from app.schemas.enrollment import CourseProgress, EnrollmentResult, EnrollmentStatus, MyEnrolledCourse
from app.services import progress_calculator

logger = logging.getLogger(__name__)

ALREADY_ENROLLED = "You are already enrolled in this course"


class EnrollmentService:
    """Lifecycle of a user's enrollment in a course and its progress figures.

    This service is the only writer of ``Enrollment.progress_percentage`` and
    ``Enrollment.completed_at``.
    """

    def _get_published_course_or_raise(self, db: Session, course_id: int) -> Course:
        course = crud_course.get_published(db, id=course_id)
        if not course:
            raise NotFoundError("Course not found or not published.")
        return course

    def _get_enrollment_or_raise(self, db: Session, course_id: int, user_id: int) -> Enrollment:
        enrollment = crud_enrollment.get_by_user_and_course(db, user_id=user_id, course_id=course_id)
        if not enrollment:
            raise NotFoundError("Enrollment not found")
        return enrollment

    def get_status(self, db: Session, course_id: int, user_id: Optional[int] = None) -> EnrollmentStatus:
        self._get_published_course_or_raise(db, course_id)
        total_lessons = crud_lesson.count_published_by_course(db, course_id=course_id)

        if user_id is None:
            return EnrollmentStatus(
                is_enrolled=False,
                can_enroll=True,
                needs_login=True,
                total_lessons=total_lessons,
            )

        enrollment = crud_enrollment.get_by_user_and_course(db, user_id=user_id, course_id=course_id)
        if not enrollment:
            return EnrollmentStatus(
                is_enrolled=False,
                can_enroll=True,
                needs_login=False,
                total_lessons=total_lessons,
            )

        completed_lessons = crud_lesson_progress.count_completed_for_course(
            db, user_id=user_id, course_id=course_id
        )
        percentage = progress_calculator.calculate_percentage(total_lessons, completed_lessons)
        return EnrollmentStatus(
            is_enrolled=True,
            can_enroll=False,
            needs_login=False,
            enrollment_id=enrollment.id,
            enrolled_at=enrollment.enrolled_at,
            progress_percentage=float(percentage),
            completed_lessons=completed_lessons,
            total_lessons=total_lessons,
            is_completed=enrollment.is_completed,
        )

    def enroll(self, db: Session, course_id: int, user_id: int) -> EnrollmentResult:
        self._get_published_course_or_raise(db, course_id)

        if crud_enrollment.exists(db, user_id=user_id, course_id=course_id):
            raise ConflictError(ALREADY_ENROLLED)

        try:
            with atomic(db):
                enrollment = crud_enrollment.create(
                    db,
                    obj_in={
                        "user_id": user_id,
                        "course_id": course_id,
                        "enrolled_at": datetime.now(timezone.utc),
                        "progress_percentage": Decimal("0"),
                    },
                    commit=False,
                )
        except IntegrityError:
            # Lost a race with a concurrent enroll for the same pair.
            logger.warning(f"Duplicate enrollment rejected by constraint: user={user_id} course={course_id}")
            raise ConflictError(ALREADY_ENROLLED)

        logger.info(f"User {user_id} enrolled in course {course_id} (enrollment {enrollment.id})")
        return EnrollmentResult(enrollment_id=enrollment.id)

    def unenroll(self, db: Session, course_id: int, user_id: int) -> None:
        enrollment = self._get_enrollment_or_raise(db, course_id, user_id)

        with atomic(db):
            removed = crud_lesson_progress.delete_for_course(db, user_id=user_id, course_id=course_id)
            db.delete(enrollment)

        logger.info(f"User {user_id} unenrolled from course {course_id}; removed {removed} progress rows")

    def list_my_courses(self, db: Session, user_id: int) -> List[MyEnrolledCourse]:
        rows = crud_enrollment.get_summaries_by_user(db, user_id=user_id)
        summaries = []
        for enrollment, course, first_name, last_name, total_lessons, completed_lessons in rows:
            percentage = progress_calculator.calculate_percentage(total_lessons, completed_lessons)
            summaries.append(MyEnrolledCourse(
                enrollment_id=enrollment.id,
                course_id=course.id,
                course_name=course.title,
                course_description=course.description or "",
                language=course.language,
                level=course.level,
                instructor_name=f"{first_name} {last_name}".strip(),
                thumbnail_url=course.thumbnail_url,
                enrolled_at=enrollment.enrolled_at,
                progress_percentage=float(percentage),
                total_lessons=total_lessons,
                completed_lessons=completed_lessons,
                is_completed=enrollment.is_completed,
                completed_at=enrollment.completed_at,
            ))
        return summaries

    def refresh_progress(self, db: Session, course_id: int, user_id: int) -> CourseProgress:
        enrollment = self._get_enrollment_or_raise(db, course_id, user_id)
        total_lessons = crud_lesson.count_published_by_course(db, course_id=course_id)

        if total_lessons == 0:
            completed_lessons = 0
            percentage = progress_calculator.HUNDRED
        else:
            completed_lessons = crud_lesson_progress.count_completed_for_course(
                db, user_id=user_id, course_id=course_id
            )
            percentage = progress_calculator.calculate_percentage(total_lessons, completed_lessons)

        changed = False
        if Decimal(enrollment.progress_percentage or 0) != percentage:
            enrollment.progress_percentage = percentage
            changed = True

        # completed_at is set once and never cleared.
        if progress_calculator.is_complete(total_lessons, completed_lessons) and enrollment.completed_at is None:
            enrollment.completed_at = datetime.now(timezone.utc)
            changed = True
            logger.info(f"User {user_id} completed course {course_id}")

        if changed:
            with atomic(db):
                db.add(enrollment)

        return CourseProgress(
            progress_percentage=float(enrollment.progress_percentage),
            is_completed=enrollment.is_completed,
            completed_lessons=completed_lessons,
            total_lessons=total_lessons,
        )


enrollment_service = EnrollmentService()
