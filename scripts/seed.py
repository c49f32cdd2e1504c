"""Bootstrap a fresh database with an admin, an instructor and sample courses.

Safe to run repeatedly: existing users and courses (matched by email and
title) are left untouched.

    python -m scripts.seed
"""
import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import CourseLanguageEnum, CourseLevelEnum, RoleEnum
from app.core.database import SessionLocal, atomic
from app.core.logging import configure_logging
from app.core.security import create_access_token
from app.crud.user import user as crud_user
from app.models.course import Course
from app.models.lesson import Lesson
from app.models.user import User

logger = logging.getLogger("app.scripts.seed")

SAMPLE_COURSES = [
    {
        "title": "Learn Arabic for Beginners",
        "description": "Start your Arabic journey with the alphabet, greetings and everyday numbers.",
        "language": CourseLanguageEnum.ARABIC,
        "level": CourseLevelEnum.BEGINNER,
        "price": Decimal("49.99"),
        "lessons": [
            ("Arabic Alphabet - Part 1", 20),
            ("Arabic Alphabet - Part 2", 20),
            ("Basic Greetings", 15),
            ("Numbers 1-20", 15),
        ],
    },
    {
        "title": "German Grammar Mastery",
        "description": "Cases, verb positions and the tricky corners of German grammar.",
        "language": CourseLanguageEnum.GERMAN,
        "level": CourseLevelEnum.INTERMEDIATE,
        "price": Decimal("79.99"),
        "lessons": [
            ("The Four Cases", 30),
            ("Verb Position in Main Clauses", 25),
            ("Subordinate Clauses", 25),
        ],
    },
    {
        "title": "Advanced English Writing",
        "description": "Essays, reports and persuasive writing for confident English speakers.",
        "language": CourseLanguageEnum.ENGLISH,
        "level": CourseLevelEnum.ADVANCED,
        "price": Decimal("99.99"),
        "lessons": [
            ("Structuring an Argument", 30),
            ("Academic Style", 30),
            ("Editing Your Own Work", 20),
        ],
    },
    {
        "title": "French Conversation Practice",
        "description": "Everyday dialogues to build fluency and confidence in spoken French.",
        "language": CourseLanguageEnum.FRENCH,
        "level": CourseLevelEnum.INTERMEDIATE,
        "price": Decimal("59.99"),
        "lessons": [
            ("At the Café", 15),
            ("Asking for Directions", 15),
            ("Talking About Your Weekend", 20),
        ],
    },
    {
        "title": "Spanish for Travelers",
        "description": "The Spanish you need at the airport, the hotel and the restaurant.",
        "language": CourseLanguageEnum.SPANISH,
        "level": CourseLevelEnum.BEGINNER,
        "price": Decimal("39.99"),
        "lessons": [
            ("Airport and Customs", 15),
            ("Checking In", 15),
            ("Ordering Food", 15),
        ],
    },
    {
        "title": "Business English Communication",
        "description": "Meetings, emails and presentations in a professional setting.",
        "language": CourseLanguageEnum.ENGLISH,
        "level": CourseLevelEnum.INTERMEDIATE,
        "price": Decimal("89.99"),
        "lessons": [
            ("Writing Clear Emails", 20),
            ("Running a Meeting", 25),
            ("Presenting Results", 25),
        ],
    },
]


def _get_or_create_user(db: Session, email: str, first_name: str, last_name: str, role: RoleEnum) -> User:
    existing = crud_user.get_by_email(db, email=email)
    if existing:
        return existing
    logger.info(f"Creating {role.value} account {email}")
    return crud_user.create(
        db,
        obj_in={"email": email, "first_name": first_name, "last_name": last_name, "role": role},
        commit=False,
    )


def _seed_courses(db: Session, instructor: User) -> int:
    created = 0
    for sample in SAMPLE_COURSES:
        if db.query(Course).filter(Course.title == sample["title"]).first():
            continue
        course = Course(
            title=sample["title"],
            description=sample["description"],
            language=sample["language"],
            level=sample["level"],
            price=sample["price"],
            is_published=True,
            instructor_id=instructor.id,
        )
        course.lessons = [
            Lesson(
                title=title,
                description=f"{title} ({sample['title']})",
                order_index=index,
                duration_minutes=minutes,
                is_published=True,
            )
            for index, (title, minutes) in enumerate(sample["lessons"], start=1)
        ]
        db.add(course)
        created += 1
    return created


def seed(db: Session) -> None:
    with atomic(db):
        admin = _get_or_create_user(db, settings.SEED_ADMIN_EMAIL, "Site", "Admin", RoleEnum.ADMIN)
        instructor = _get_or_create_user(
            db, settings.SEED_INSTRUCTOR_EMAIL, "Default", "Instructor", RoleEnum.INSTRUCTOR
        )
        created = _seed_courses(db, instructor)

    logger.info(f"Seeded {created} new courses")
    logger.info(f"Admin token: {create_access_token(admin.id, role=RoleEnum.ADMIN)}")
    logger.info(f"Instructor token: {create_access_token(instructor.id, role=RoleEnum.INSTRUCTOR)}")


if __name__ == "__main__":
    configure_logging()
    session = SessionLocal()
    try:
        seed(session)
    finally:
        session.close()
