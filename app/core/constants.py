from enum import Enum


class RoleEnum(str, Enum):
    STUDENT = "student"
    INSTRUCTOR = "instructor"
    ADMIN = "admin"

class CourseLanguageEnum(str, Enum):
    ARABIC = "arabic"
    ENGLISH = "english"
    GERMAN = "german"
    FRENCH = "french"
    SPANISH = "spanish"

class CourseLevelEnum(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

class ApplicationStatusEnum(str, Enum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"

TERMINAL_APPLICATION_STATUSES = frozenset({
    ApplicationStatusEnum.APPROVED,
    ApplicationStatusEnum.REJECTED,
})

DEFAULT_REJECTION_REASON = "Application requirements not met"


def enum_values(enum_cls):
    """Persist enum values rather than member names."""
    return [member.value for member in enum_cls]
