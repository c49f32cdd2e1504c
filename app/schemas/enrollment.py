from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime
from app.core.constants import CourseLanguageEnum, CourseLevelEnum


class EnrollmentCreate(BaseModel):
    user_id: int
    course_id: int
    enrolled_at: Optional[datetime] = None
    progress_percentage: float = 0


class EnrollmentUpdate(BaseModel):
    completed_at: Optional[datetime] = None
    progress_percentage: Optional[float] = None


class EnrollmentStatus(BaseModel):
    is_enrolled: bool
    can_enroll: bool
    needs_login: bool
    enrollment_id: Optional[int] = None
    enrolled_at: Optional[datetime] = None
    progress_percentage: float = 0
    completed_lessons: int = 0
    total_lessons: int = 0
    is_completed: bool = False


class EnrollmentResult(BaseModel):
    enrollment_id: int


class CourseProgress(BaseModel):
    progress_percentage: float
    is_completed: bool
    completed_lessons: int
    total_lessons: int


class MyEnrolledCourse(BaseModel):
    enrollment_id: int
    course_id: int
    course_name: str
    course_description: str = ""
    language: CourseLanguageEnum
    level: CourseLevelEnum
    instructor_name: str
    thumbnail_url: Optional[str] = None
    enrolled_at: datetime
    progress_percentage: float
    total_lessons: int
    completed_lessons: int
    is_completed: bool
    completed_at: Optional[datetime] = None

    model_config = ConfigDict(use_enum_values=True)
