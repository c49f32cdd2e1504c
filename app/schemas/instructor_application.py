from pydantic import BaseModel, ConfigDict, field_validator
from typing import Optional, List
from datetime import datetime
from app.core.constants import ApplicationStatusEnum


class InstructorApplicationSubmit(BaseModel):
    bio: str
    expertise: str
    experience: str
    motivation_reason: str
    phone_number: Optional[str] = None

    @field_validator("bio", "expertise", "experience", "motivation_reason")
    def not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("All required fields must be filled")
        return v.strip()

    @field_validator("phone_number")
    def strip_phone(cls, v):
        if v is None:
            return v
        return v.strip() or None


class InstructorApplicationCreate(BaseModel):
    user_id: int
    bio: str
    expertise: str
    experience: str
    motivation_reason: str
    phone_number: Optional[str] = None
    status: ApplicationStatusEnum = ApplicationStatusEnum.PENDING


class ReviewRequest(BaseModel):
    reason: Optional[str] = None
    notes: Optional[str] = None


class SubmitResult(BaseModel):
    application_id: int


class ApplicationStatus(BaseModel):
    has_application: bool
    status: Optional[ApplicationStatusEnum] = None
    application_date: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    application_id: Optional[int] = None

    model_config = ConfigDict(use_enum_values=True)


class InstructorApplication(BaseModel):
    id: int
    user_id: int
    applicant_name: str
    email: str
    phone_number: Optional[str] = None
    bio: str
    expertise: str
    experience: str
    motivation_reason: str
    status: ApplicationStatusEnum
    application_date: datetime
    reviewed_at: Optional[datetime] = None
    review_notes: Optional[str] = None
    rejection_reason: Optional[str] = None

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)


class ApplicationList(BaseModel):
    applications: List[InstructorApplication]
    total_count: int


class ApplicationStats(BaseModel):
    pending: int = 0
    under_review: int = 0
    approved: int = 0
    rejected: int = 0


class ReviewOutcome(BaseModel):
    application_id: int
    status: ApplicationStatusEnum

    model_config = ConfigDict(use_enum_values=True)
