import asyncio
import logging
from datetime import datetime, timezone
from functools import partial
from typing import Awaitable, Callable, Optional, Set

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.constants import ApplicationStatusEnum, DEFAULT_REJECTION_REASON, RoleEnum
from app.core.database import atomic
from app.core.exceptions import ConflictError, InvalidTransitionError, NotFoundError
from app.crud.instructor_application import instructor_application as crud_application
from app.models.instructor_application import InstructorApplication as ApplicationModel
from app.models.user import User
from app.schemas.instructor_application import (
    ApplicationList,
    ApplicationStats,
    ApplicationStatus,
    InstructorApplication,
    InstructorApplicationSubmit,
    ReviewOutcome,
    SubmitResult,
)
from app.services.email import EmailService

logger = logging.getLogger(__name__)

ALREADY_APPLIED = "You have already submitted an application"


def _to_schema(application: ApplicationModel) -> InstructorApplication:
    user = application.user
    return InstructorApplication(
        id=application.id,
        user_id=application.user_id,
        applicant_name=user.full_name if user else "N/A",
        email=user.email if user else "",
        phone_number=application.phone_number,
        bio=application.bio,
        expertise=application.expertise,
        experience=application.experience,
        motivation_reason=application.motivation_reason,
        status=application.status,
        application_date=application.application_date,
        reviewed_at=application.reviewed_at,
        review_notes=application.review_notes,
        rejection_reason=application.rejection_reason,
    )


class InstructorApplicationService:
    """Instructor application submission and the admin review state machine.

    Pending -> UnderReview -> Approved | Rejected. Approved and Rejected are
    terminal. Every transition is a guarded UPDATE, so of two overlapping
    reviews only the first to commit wins. Email notifications are scheduled
    after the outcome is committed, run in the background and never undo it.
    """

    def __init__(self):
        self._notifications: Set[asyncio.Task] = set()

    def _get_or_raise(self, db: Session, application_id: int) -> ApplicationModel:
        application = crud_application.get(db, id=application_id)
        if not application:
            raise NotFoundError("Application not found")
        return application

    def _transition(self, db: Session, application: ApplicationModel, target: ApplicationStatusEnum, **values) -> None:
        if not crud_application.transition(db, id=application.id, target=target, values=values):
            db.refresh(application)
            raise InvalidTransitionError(ApplicationStatusEnum(application.status).value, target.value)

    def _notify(self, user: Optional[User], send: Callable[..., Awaitable], *args) -> None:
        if not user or not user.email or not user.first_name:
            logger.warning(f"Skipping {send.__name__}: user has no email or first name")
            return
        try:
            task = asyncio.get_running_loop().create_task(send(user.email, user.first_name, *args))
        except Exception:
            logger.exception(f"{send.__name__} failed for {user.email}")
            return
        self._notifications.add(task)
        task.add_done_callback(partial(self._notification_done, send.__name__, user.email))

    def _notification_done(self, name: str, email: str, task: asyncio.Task) -> None:
        self._notifications.discard(task)
        if task.cancelled():
            logger.warning(f"{name} for {email} was cancelled")
        elif task.exception() is not None:
            logger.error(f"{name} failed for {email}: {task.exception()}")

    async def wait_for_notifications(self) -> None:
        """Wait for every scheduled notification on the running loop to finish."""
        if self._notifications:
            await asyncio.gather(*list(self._notifications), return_exceptions=True)

    async def submit(self, db: Session, user: User, application_in: InstructorApplicationSubmit) -> SubmitResult:
        if crud_application.get_by_user(db, user_id=user.id):
            logger.warning(f"User {user.id} already has an application")
            raise ConflictError(ALREADY_APPLIED)

        try:
            with atomic(db):
                application = crud_application.create(
                    db,
                    obj_in={
                        **application_in.model_dump(),
                        "user_id": user.id,
                        "status": ApplicationStatusEnum.PENDING,
                        "application_date": datetime.now(timezone.utc),
                    },
                    commit=False,
                )
        except IntegrityError:
            raise ConflictError(ALREADY_APPLIED)

        logger.info(f"Application {application.id} submitted by user {user.id}")
        self._notify(user, EmailService.send_application_submitted_email)
        return SubmitResult(application_id=application.id)

    def get_my_status(self, db: Session, user_id: int) -> ApplicationStatus:
        application = crud_application.get_by_user(db, user_id=user_id)
        if not application:
            return ApplicationStatus(has_application=False)
        return ApplicationStatus(
            has_application=True,
            status=application.status,
            application_date=application.application_date,
            reviewed_at=application.reviewed_at,
            application_id=application.id,
        )

    def list_applications(self, db: Session, skip: int = 0, limit: int = 100) -> ApplicationList:
        applications = crud_application.get_multi_newest_first(db, skip=skip, limit=limit)
        return ApplicationList(
            applications=[_to_schema(a) for a in applications],
            total_count=crud_application.count(db),
        )

    def get_application(self, db: Session, application_id: int) -> InstructorApplication:
        return _to_schema(self._get_or_raise(db, application_id))

    def get_stats(self, db: Session) -> ApplicationStats:
        counts = crud_application.count_by_status(db)
        return ApplicationStats(
            pending=counts.get(ApplicationStatusEnum.PENDING, 0),
            under_review=counts.get(ApplicationStatusEnum.UNDER_REVIEW, 0),
            approved=counts.get(ApplicationStatusEnum.APPROVED, 0),
            rejected=counts.get(ApplicationStatusEnum.REJECTED, 0),
        )

    def set_under_review(self, db: Session, application_id: int, notes: Optional[str] = None) -> ReviewOutcome:
        application = self._get_or_raise(db, application_id)
        with atomic(db):
            self._transition(db, application, ApplicationStatusEnum.UNDER_REVIEW, review_notes=notes or "Under review")

        logger.info(f"Application {application_id} set to under review")
        return ReviewOutcome(application_id=application.id, status=application.status)

    async def approve(self, db: Session, application_id: int, notes: Optional[str] = None) -> ReviewOutcome:
        application = self._get_or_raise(db, application_id)
        with atomic(db):
            self._transition(
                db,
                application,
                ApplicationStatusEnum.APPROVED,
                reviewed_at=datetime.now(timezone.utc),
                review_notes=notes or "Approved by admin",
            )
            application.user.role = RoleEnum.INSTRUCTOR

        logger.info(f"Application {application_id} approved; user {application.user_id} is now an instructor")
        self._notify(application.user, EmailService.send_application_approved_email)
        return ReviewOutcome(application_id=application.id, status=application.status)

    async def reject(
        self, db: Session, application_id: int, reason: Optional[str] = None, notes: Optional[str] = None
    ) -> ReviewOutcome:
        application = self._get_or_raise(db, application_id)
        reason = reason or DEFAULT_REJECTION_REASON
        with atomic(db):
            self._transition(
                db,
                application,
                ApplicationStatusEnum.REJECTED,
                reviewed_at=datetime.now(timezone.utc),
                rejection_reason=reason,
                review_notes=notes or "Rejected by admin",
            )

        logger.info(f"Application {application_id} rejected: {reason}")
        self._notify(application.user, EmailService.send_application_rejected_email, reason, notes)
        return ReviewOutcome(application_id=application.id, status=application.status)


instructor_application_service = InstructorApplicationService()
