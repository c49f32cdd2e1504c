from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.models.user import User
from app.schemas.instructor_application import ApplicationStatus, InstructorApplicationSubmit, SubmitResult
from app.schemas.response import APIResponse
from app.services.instructor_application import instructor_application_service
from app.utils import deps

router = APIRouter()


@router.post("/submit", response_model=APIResponse[SubmitResult])
async def submit_application(
    application_in: InstructorApplicationSubmit,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    result = await instructor_application_service.submit(db, user=current_user, application_in=application_in)
    return APIResponse(message="Application submitted successfully", data=result)


@router.get("/status", response_model=APIResponse[ApplicationStatus])
def get_application_status(
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    application_status = instructor_application_service.get_my_status(db, user_id=current_user.id)
    return APIResponse(message="Application status retrieved", data=application_status)
