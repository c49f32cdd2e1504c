from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
from app.core.constants import ApplicationStatusEnum, TERMINAL_APPLICATION_STATUSES, enum_values

class InstructorApplication(Base):
    __tablename__ = "instructor_applications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    bio = Column(String(500), nullable=False)
    expertise = Column(String(200), nullable=False)
    experience = Column(String(500), nullable=False)
    motivation_reason = Column(String(300), nullable=False)
    phone_number = Column(String(32), nullable=True)
    status = Column(Enum(ApplicationStatusEnum, values_callable=enum_values), nullable=False, default=ApplicationStatusEnum.PENDING, index=True)
    application_date = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    review_notes = Column(String, nullable=True)
    rejection_reason = Column(String, nullable=True)

    user = relationship("User", back_populates="instructor_application")

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_APPLICATION_STATUSES
