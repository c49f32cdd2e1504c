import pytest

from app.core.exceptions import NotFoundError, ValidationFailedError
from app.crud.enrollment import enrollment as crud_enrollment
from app.crud.lesson_progress import lesson_progress as crud_lesson_progress
from app.models.lesson_progress import LessonProgress
from app.services.enrollment import enrollment_service
from app.services.lesson_progress import lesson_progress_service


@pytest.fixture
def enrolled_course(db_session, course_factory, student):
    course = course_factory(lessons=4)
    enrollment_service.enroll(db_session, course_id=course.id, user_id=student.id)
    return course


def test_completing_a_lesson_refreshes_course_progress(db_session, enrolled_course, student):
    lesson = enrolled_course.lessons[0]

    progress = lesson_progress_service.complete_lesson(db_session, lesson_id=lesson.id, user_id=student.id)

    assert progress.completed_lessons == 1
    assert progress.total_lessons == 4
    assert progress.progress_percentage == 25.0
    row = crud_lesson_progress.get_by_user_and_lesson(db_session, user_id=student.id, lesson_id=lesson.id)
    assert row.is_completed is True
    assert row.completed_at is not None


def test_completing_the_same_lesson_twice_is_idempotent(db_session, enrolled_course, student):
    lesson = enrolled_course.lessons[0]
    lesson_progress_service.complete_lesson(db_session, lesson_id=lesson.id, user_id=student.id)
    first_completed_at = crud_lesson_progress.get_by_user_and_lesson(
        db_session, user_id=student.id, lesson_id=lesson.id
    ).completed_at

    progress = lesson_progress_service.complete_lesson(db_session, lesson_id=lesson.id, user_id=student.id)

    assert progress.completed_lessons == 1
    assert db_session.query(LessonProgress).filter_by(user_id=student.id, lesson_id=lesson.id).count() == 1
    row = crud_lesson_progress.get_by_user_and_lesson(db_session, user_id=student.id, lesson_id=lesson.id)
    assert row.completed_at == first_completed_at


def test_completing_every_lesson_completes_the_course(db_session, enrolled_course, student):
    for lesson in enrolled_course.lessons:
        progress = lesson_progress_service.complete_lesson(db_session, lesson_id=lesson.id, user_id=student.id)

    assert progress.is_completed is True
    assert progress.progress_percentage == 100.0
    enrollment = crud_enrollment.get_by_user_and_course(db_session, user_id=student.id, course_id=enrolled_course.id)
    assert enrollment.completed_at is not None


def test_lesson_requires_enrollment(db_session, course_factory, student):
    course = course_factory(lessons=2)

    with pytest.raises(NotFoundError):
        lesson_progress_service.complete_lesson(db_session, lesson_id=course.lessons[0].id, user_id=student.id)


def test_unpublished_lesson_is_not_found(db_session, course_factory, student):
    course = course_factory(lessons=1, unpublished_lessons=1)
    enrollment_service.enroll(db_session, course_id=course.id, user_id=student.id)
    hidden = [lesson for lesson in course.lessons if not lesson.is_published][0]

    with pytest.raises(NotFoundError):
        lesson_progress_service.complete_lesson(db_session, lesson_id=hidden.id, user_id=student.id)


def test_missing_lesson_is_not_found(db_session, student):
    with pytest.raises(NotFoundError):
        lesson_progress_service.complete_lesson(db_session, lesson_id=9999, user_id=student.id)


def test_watch_time_keeps_the_maximum(db_session, enrolled_course, student):
    lesson = enrolled_course.lessons[1]

    lesson_progress_service.record_watch_time(db_session, lesson_id=lesson.id, user_id=student.id, watched_seconds=120)
    lesson_progress_service.record_watch_time(db_session, lesson_id=lesson.id, user_id=student.id, watched_seconds=45)
    row = lesson_progress_service.record_watch_time(
        db_session, lesson_id=lesson.id, user_id=student.id, watched_seconds=300
    )

    assert row.watched_seconds == 300
    assert row.is_completed is False


def test_negative_watch_time_is_rejected(db_session, enrolled_course, student):
    with pytest.raises(ValidationFailedError):
        lesson_progress_service.record_watch_time(
            db_session, lesson_id=enrolled_course.lessons[0].id, user_id=student.id, watched_seconds=-1
        )


def test_deleting_a_lesson_drops_its_progress(db_session, enrolled_course, student):
    lesson = enrolled_course.lessons[0]
    lesson_progress_service.complete_lesson(db_session, lesson_id=lesson.id, user_id=student.id)

    db_session.delete(lesson)
    db_session.commit()

    assert db_session.query(LessonProgress).filter_by(user_id=student.id).count() == 0
    progress = enrollment_service.refresh_progress(db_session, course_id=enrolled_course.id, user_id=student.id)
    assert progress.total_lessons == 3
    assert progress.completed_lessons == 0
