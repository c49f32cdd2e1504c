from typing import List, Optional
from sqlalchemy.orm import Session

from app.core.constants import CourseLanguageEnum, CourseLevelEnum
from app.core.exceptions import NotFoundError
from app.crud.course import course as crud_course
from app.crud.lesson import lesson as crud_lesson
from app.models.user import User
from app.schemas.course import CourseDetail, CourseSummary, InstructorCourse
from app.schemas.lesson import Lesson as LessonSchema


def _summary_fields(row) -> dict:
    course, first_name, last_name, lesson_count = row
    return {
        "id": course.id,
        "title": course.title,
        "description": course.description or "",
        "language": course.language,
        "level": course.level,
        "price": float(course.price or 0),
        "thumbnail_url": course.thumbnail_url,
        "instructor_name": f"{first_name} {last_name}".strip(),
        "lesson_count": lesson_count,
        "created_at": course.created_at,
    }


class CourseService:

    def list_published(
        self,
        db: Session,
        language: Optional[CourseLanguageEnum] = None,
        level: Optional[CourseLevelEnum] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[CourseSummary]:
        search = search.strip() if search else None
        rows = crud_course.get_published_multi(
            db, language=language, level=level, search=search, skip=skip, limit=limit
        )
        return [CourseSummary(**_summary_fields(row)) for row in rows]

    def get_published(self, db: Session, course_id: int) -> CourseDetail:
        row = crud_course.get_published_with_counts(db, id=course_id)
        if not row:
            raise NotFoundError("Course not found or not published.")
        lessons = crud_lesson.get_published_by_course(db, course_id=course_id)
        return CourseDetail(
            **_summary_fields(row),
            lessons=[LessonSchema.model_validate(lesson) for lesson in lessons],
        )

    def list_instructor_courses(self, db: Session, user: User) -> List[InstructorCourse]:
        rows = crud_course.get_by_instructor(db, instructor_id=user.id)
        return [
            InstructorCourse(**_summary_fields(row), is_published=row[0].is_published)
            for row in rows
        ]


course_service = CourseService()
