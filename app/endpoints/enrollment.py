from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.models.user import User
from app.schemas.enrollment import CourseProgress, EnrollmentResult, EnrollmentStatus, MyEnrolledCourse
from app.schemas.response import APIResponse
from app.services.enrollment import enrollment_service
from app.utils import deps

router = APIRouter()


@router.get("/status/{course_id}", response_model=APIResponse[EnrollmentStatus])
def get_enrollment_status(
    course_id: int,
    db: Session = Depends(deps.get_db),
    current_user: Optional[User] = Depends(deps.get_optional_user),
):
    enrollment_status = enrollment_service.get_status(
        db, course_id=course_id, user_id=current_user.id if current_user else None
    )
    return APIResponse(message="Enrollment status retrieved", data=enrollment_status)


@router.post("/enroll/{course_id}", response_model=APIResponse[EnrollmentResult])
def enroll_in_course(
    course_id: int,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    result = enrollment_service.enroll(db, course_id=course_id, user_id=current_user.id)
    return APIResponse(message="Successfully enrolled in course", data=result)


@router.delete("/unenroll/{course_id}", response_model=APIResponse[dict])
def unenroll_from_course(
    course_id: int,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    enrollment_service.unenroll(db, course_id=course_id, user_id=current_user.id)
    return APIResponse(message="Successfully unenrolled from course", data={"course_id": course_id})


@router.get("/my-courses", response_model=APIResponse[List[MyEnrolledCourse]])
def get_my_courses(
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    courses = enrollment_service.list_my_courses(db, user_id=current_user.id)
    return APIResponse(message="Enrolled courses retrieved", data=courses)


@router.put("/update-progress/{course_id}", response_model=APIResponse[CourseProgress])
def update_progress(
    course_id: int,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    progress = enrollment_service.refresh_progress(db, course_id=course_id, user_id=current_user.id)
    return APIResponse(message="Progress updated", data=progress)
