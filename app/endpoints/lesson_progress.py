from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.models.user import User
from app.schemas.enrollment import CourseProgress
from app.schemas.lesson_progress import LessonProgress, WatchTimeUpdate
from app.schemas.response import APIResponse
from app.services.lesson_progress import lesson_progress_service
from app.utils import deps

router = APIRouter()


@router.post("/lessons/{lesson_id}/complete", response_model=APIResponse[CourseProgress])
def complete_lesson(
    lesson_id: int,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    progress = lesson_progress_service.complete_lesson(db, lesson_id=lesson_id, user_id=current_user.id)
    return APIResponse(message="Lesson marked as completed", data=progress)


@router.put("/lessons/{lesson_id}/watch", response_model=APIResponse[LessonProgress])
def record_watch_time(
    lesson_id: int,
    watch_in: WatchTimeUpdate,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    progress = lesson_progress_service.record_watch_time(
        db, lesson_id=lesson_id, user_id=current_user.id, watched_seconds=watch_in.watched_seconds
    )
    return APIResponse(message="Watch time recorded", data=LessonProgress.model_validate(progress))
