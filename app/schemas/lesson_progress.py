from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime


class LessonProgressCreate(BaseModel):
    user_id: int
    lesson_id: int
    is_completed: bool = False
    completed_at: Optional[datetime] = None
    watched_seconds: int = 0


class LessonProgressUpdate(BaseModel):
    is_completed: Optional[bool] = None
    completed_at: Optional[datetime] = None
    watched_seconds: Optional[int] = None


class WatchTimeUpdate(BaseModel):
    watched_seconds: int = Field(..., ge=0)


class LessonProgress(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    lesson_id: int
    is_completed: bool
    completed_at: Optional[datetime] = None
    watched_seconds: int
