from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

class LessonBase(BaseModel):
    title: str
    description: str = ""
    content: Optional[str] = None
    video_url: Optional[str] = None
    duration_minutes: int = Field(default=0, ge=0)
    order_index: int = Field(default=0)

class LessonCreate(LessonBase):
    course_id: int
    is_published: bool = False

class LessonUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None
    video_url: Optional[str] = None
    duration_minutes: Optional[int] = Field(default=None, ge=0)
    order_index: Optional[int] = None
    is_published: Optional[bool] = None

class Lesson(LessonBase):
    id: int

    model_config = ConfigDict(from_attributes=True)
