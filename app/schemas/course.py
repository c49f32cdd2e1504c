from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime
from app.core.constants import CourseLanguageEnum, CourseLevelEnum
from app.schemas.lesson import Lesson

class CourseBase(BaseModel):
    title: str
    description: str = ""
    language: CourseLanguageEnum
    level: CourseLevelEnum = Field(default=CourseLevelEnum.BEGINNER)
    price: float = Field(default=0, ge=0)
    thumbnail_url: Optional[str] = None

    model_config = ConfigDict(use_enum_values=True)

class CourseCreate(CourseBase):
    instructor_id: int
    is_published: bool = False

class CourseUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    language: Optional[CourseLanguageEnum] = None
    level: Optional[CourseLevelEnum] = None
    price: Optional[float] = Field(default=None, ge=0)
    thumbnail_url: Optional[str] = None
    is_published: Optional[bool] = None

class CourseSummary(CourseBase):
    """Catalog listing row with the aggregate lesson count."""
    id: int
    instructor_name: str
    lesson_count: int = 0
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

class CourseDetail(CourseSummary):
    lessons: List[Lesson] = Field(default_factory=list)

class InstructorCourse(CourseSummary):
    is_published: bool
