from typing import Optional
from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from app.core.constants import RoleEnum
from app.schemas.instructor_application import (
    ApplicationList,
    ApplicationStats,
    InstructorApplication,
    ReviewOutcome,
    ReviewRequest,
)
from app.schemas.response import APIResponse
from app.services.instructor_application import instructor_application_service
from app.utils import deps

router = APIRouter(dependencies=[Depends(deps.require_role(RoleEnum.ADMIN))])


@router.get("/applications", response_model=APIResponse[ApplicationList])
def list_applications(
    db: Session = Depends(deps.get_db),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
):
    applications = instructor_application_service.list_applications(db, skip=skip, limit=limit)
    return APIResponse(message="Applications retrieved", data=applications)


@router.get("/applications/{application_id}", response_model=APIResponse[InstructorApplication])
def get_application(application_id: int, db: Session = Depends(deps.get_db)):
    application = instructor_application_service.get_application(db, application_id=application_id)
    return APIResponse(message="Application retrieved", data=application)


@router.get("/stats", response_model=APIResponse[ApplicationStats])
def get_application_stats(db: Session = Depends(deps.get_db)):
    stats = instructor_application_service.get_stats(db)
    return APIResponse(message="Application statistics retrieved", data=stats)


@router.post("/applications/{application_id}/review", response_model=APIResponse[ReviewOutcome])
def set_under_review(
    application_id: int,
    review_in: Optional[ReviewRequest] = Body(None),
    db: Session = Depends(deps.get_db),
):
    notes = review_in.notes if review_in else None
    outcome = instructor_application_service.set_under_review(db, application_id=application_id, notes=notes)
    return APIResponse(message="Application set to under review", data=outcome)


@router.post("/applications/{application_id}/approve", response_model=APIResponse[ReviewOutcome])
async def approve_application(
    application_id: int,
    review_in: Optional[ReviewRequest] = Body(None),
    db: Session = Depends(deps.get_db),
):
    notes = review_in.notes if review_in else None
    outcome = await instructor_application_service.approve(db, application_id=application_id, notes=notes)
    return APIResponse(message="Application approved successfully", data=outcome)


@router.post("/applications/{application_id}/reject", response_model=APIResponse[ReviewOutcome])
async def reject_application(
    application_id: int,
    review_in: Optional[ReviewRequest] = Body(None),
    db: Session = Depends(deps.get_db),
):
    outcome = await instructor_application_service.reject(
        db,
        application_id=application_id,
        reason=review_in.reason if review_in else None,
        notes=review_in.notes if review_in else None,
    )
    return APIResponse(message="Application rejected", data=outcome)
