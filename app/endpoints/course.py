from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.constants import CourseLanguageEnum, CourseLevelEnum, RoleEnum
from app.models.user import User
from app.schemas.course import CourseDetail, CourseSummary, InstructorCourse
from app.schemas.response import APIResponse
from app.services.course import course_service
from app.utils import deps

router = APIRouter()


@router.get("", response_model=APIResponse[List[CourseSummary]])
def list_courses(
    db: Session = Depends(deps.get_db),
    language: Optional[CourseLanguageEnum] = Query(None),
    level: Optional[CourseLevelEnum] = Query(None),
    search: Optional[str] = Query(None, max_length=200),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
):
    courses = course_service.list_published(
        db, language=language, level=level, search=search, skip=skip, limit=limit
    )
    return APIResponse(message="Courses retrieved successfully", data=courses)


@router.get("/mine", response_model=APIResponse[List[InstructorCourse]])
def list_my_courses(
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.require_role(RoleEnum.INSTRUCTOR, RoleEnum.ADMIN)),
):
    courses = course_service.list_instructor_courses(db, user=current_user)
    return APIResponse(message="Instructor courses retrieved successfully", data=courses)


@router.get("/{course_id}", response_model=APIResponse[CourseDetail])
def get_course(course_id: int, db: Session = Depends(deps.get_db)):
    course = course_service.get_published(db, course_id=course_id)
    return APIResponse(message="Course retrieved successfully", data=course)
