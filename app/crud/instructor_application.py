from typing import Any, Dict, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from app.core.constants import ApplicationStatusEnum, TERMINAL_APPLICATION_STATUSES
from app.crud.base import CRUDBase
from app.models.instructor_application import InstructorApplication
from app.schemas.instructor_application import InstructorApplicationCreate, ReviewRequest


class CRUDInstructorApplication(CRUDBase[InstructorApplication, InstructorApplicationCreate, ReviewRequest]):

    def _query_with_user(self, db: Session):
        return db.query(InstructorApplication).options(joinedload(InstructorApplication.user))

    def get(self, db: Session, id: int) -> Optional[InstructorApplication]:
        return self._query_with_user(db).filter(InstructorApplication.id == id).first()

    def get_by_user(self, db: Session, *, user_id: int) -> Optional[InstructorApplication]:
        return self._query_with_user(db).filter(InstructorApplication.user_id == user_id).first()

    def get_multi_newest_first(self, db: Session, *, skip: int = 0, limit: int = 100) -> List[InstructorApplication]:
        return (
            self._query_with_user(db)
            .order_by(InstructorApplication.application_date.desc(), InstructorApplication.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count(self, db: Session) -> int:
        return db.query(func.count(InstructorApplication.id)).scalar() or 0

    def transition(
        self, db: Session, *, id: int, target: ApplicationStatusEnum, values: Optional[Dict[str, Any]] = None
    ) -> bool:
        """Move a still-open application to ``target`` in a single guarded UPDATE.

        Returns False when the row is missing or already terminal, including
        when a concurrent review committed first.
        """
        updated = (
            db.query(InstructorApplication)
            .filter(
                InstructorApplication.id == id,
                InstructorApplication.status.notin_(list(TERMINAL_APPLICATION_STATUSES)),
            )
            .update({"status": target, **(values or {})}, synchronize_session=False)
        )
        return updated == 1

    def count_by_status(self, db: Session) -> Dict[ApplicationStatusEnum, int]:
        rows = (
            db.query(InstructorApplication.status, func.count(InstructorApplication.id))
            .group_by(InstructorApplication.status)
            .all()
        )
        return {status: count for status, count in rows}


instructor_application = CRUDInstructorApplication(InstructorApplication)
