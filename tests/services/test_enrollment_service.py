from decimal import Decimal

import pytest
from sqlalchemy.orm import Session
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from app.core.exceptions import ConflictError, NotFoundError, PersistenceError
from app.crud.enrollment import enrollment as crud_enrollment
from app.models.enrollment import Enrollment
from app.models.lesson import Lesson
from app.models.lesson_progress import LessonProgress
from app.services.enrollment import enrollment_service


def _mark_completed(db: Session, user, lessons):
    for lesson in lessons:
        db.add(LessonProgress(user_id=user.id, lesson_id=lesson.id, is_completed=True, watched_seconds=0))
    db.commit()


def _progress_rows(db: Session, user, course) -> int:
    return (
        db.query(LessonProgress)
        .join(Lesson, Lesson.id == LessonProgress.lesson_id)
        .filter(LessonProgress.user_id == user.id, Lesson.course_id == course.id)
        .count()
    )


def test_anonymous_status_on_published_course(db_session, course_factory):
    course = course_factory(lessons=10)

    status = enrollment_service.get_status(db_session, course_id=course.id)

    assert status.is_enrolled is False
    assert status.can_enroll is True
    assert status.needs_login is True
    assert status.total_lessons == 10


def test_status_for_signed_in_user_not_enrolled(db_session, course_factory, student):
    course = course_factory(lessons=3)

    status = enrollment_service.get_status(db_session, course_id=course.id, user_id=student.id)

    assert status.is_enrolled is False
    assert status.can_enroll is True
    assert status.needs_login is False
    assert status.total_lessons == 3


def test_status_for_enrolled_user_reports_progress(db_session, course_factory, student):
    course = course_factory(lessons=4)
    result = enrollment_service.enroll(db_session, course_id=course.id, user_id=student.id)
    _mark_completed(db_session, student, course.lessons[:1])

    status = enrollment_service.get_status(db_session, course_id=course.id, user_id=student.id)

    assert status.is_enrolled is True
    assert status.can_enroll is False
    assert status.enrollment_id == result.enrollment_id
    assert status.completed_lessons == 1
    assert status.progress_percentage == 25.0
    assert status.is_completed is False


def test_status_hides_unpublished_course(db_session, course_factory):
    course = course_factory(lessons=2, is_published=False)

    with pytest.raises(NotFoundError):
        enrollment_service.get_status(db_session, course_id=course.id)


def test_enroll_creates_zero_progress_row(db_session, course_factory, student):
    course = course_factory(lessons=2)

    result = enrollment_service.enroll(db_session, course_id=course.id, user_id=student.id)

    enrollment = crud_enrollment.get(db_session, id=result.enrollment_id)
    assert enrollment.user_id == student.id
    assert enrollment.course_id == course.id
    assert Decimal(enrollment.progress_percentage) == Decimal("0")
    assert enrollment.completed_at is None
    assert enrollment.enrolled_at is not None


def test_second_enroll_conflicts(db_session, course_factory, student):
    course = course_factory(lessons=2)
    enrollment_service.enroll(db_session, course_id=course.id, user_id=student.id)

    with pytest.raises(ConflictError):
        enrollment_service.enroll(db_session, course_id=course.id, user_id=student.id)

    assert db_session.query(Enrollment).filter_by(user_id=student.id, course_id=course.id).count() == 1


def test_unique_constraint_backstops_racing_enroll(db_session, course_factory, student, monkeypatch):
    course = course_factory(lessons=2)
    enrollment_service.enroll(db_session, course_id=course.id, user_id=student.id)
    # Simulate a concurrent request that passed the pre-check before the first insert landed.
    monkeypatch.setattr(crud_enrollment, "exists", lambda db, **kwargs: False)

    with pytest.raises(ConflictError):
        enrollment_service.enroll(db_session, course_id=course.id, user_id=student.id)

    assert db_session.query(Enrollment).filter_by(user_id=student.id, course_id=course.id).count() == 1


def test_enroll_in_unpublished_course_is_not_found(db_session, course_factory, student):
    course = course_factory(lessons=1, is_published=False)

    with pytest.raises(NotFoundError):
        enrollment_service.enroll(db_session, course_id=course.id, user_id=student.id)


def test_unenroll_removes_progress_for_that_course_only(db_session, course_factory, student):
    course = course_factory(lessons=3)
    other_course = course_factory(lessons=2)
    enrollment_service.enroll(db_session, course_id=course.id, user_id=student.id)
    enrollment_service.enroll(db_session, course_id=other_course.id, user_id=student.id)
    _mark_completed(db_session, student, course.lessons[:2])
    _mark_completed(db_session, student, other_course.lessons[:1])

    enrollment_service.unenroll(db_session, course_id=course.id, user_id=student.id)

    assert _progress_rows(db_session, student, course) == 0
    assert _progress_rows(db_session, student, other_course) == 1
    assert crud_enrollment.get_by_user_and_course(db_session, user_id=student.id, course_id=course.id) is None
    assert crud_enrollment.get_by_user_and_course(db_session, user_id=student.id, course_id=other_course.id)


def test_unenroll_keeps_everything_when_commit_fails(db_session, course_factory, student, monkeypatch):
    course = course_factory(lessons=3)
    enrollment_service.enroll(db_session, course_id=course.id, user_id=student.id)
    _mark_completed(db_session, student, course.lessons[:2])

    def _failing_commit():
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(db_session, "commit", _failing_commit)
    with pytest.raises(PersistenceError):
        enrollment_service.unenroll(db_session, course_id=course.id, user_id=student.id)
    monkeypatch.undo()

    assert _progress_rows(db_session, student, course) == 2
    assert crud_enrollment.get_by_user_and_course(db_session, user_id=student.id, course_id=course.id)


def test_unenroll_keeps_progress_when_enrollment_delete_fails(db_session, course_factory, student, monkeypatch):
    course = course_factory(lessons=2)
    enrollment_service.enroll(db_session, course_id=course.id, user_id=student.id)
    _mark_completed(db_session, student, course.lessons)

    def _failing_delete(instance):
        raise OperationalError("DELETE FROM enrollments", {}, Exception("database is locked"))

    monkeypatch.setattr(db_session, "delete", _failing_delete)
    with pytest.raises(PersistenceError):
        enrollment_service.unenroll(db_session, course_id=course.id, user_id=student.id)
    monkeypatch.undo()

    assert _progress_rows(db_session, student, course) == 2
    assert crud_enrollment.get_by_user_and_course(db_session, user_id=student.id, course_id=course.id)


def test_unenroll_without_enrollment_is_not_found(db_session, course_factory, student):
    course = course_factory(lessons=1)

    with pytest.raises(NotFoundError):
        enrollment_service.unenroll(db_session, course_id=course.id, user_id=student.id)


def test_refresh_half_way(db_session, course_factory, student):
    course = course_factory(lessons=4)
    enrollment_service.enroll(db_session, course_id=course.id, user_id=student.id)
    _mark_completed(db_session, student, course.lessons[:2])

    progress = enrollment_service.refresh_progress(db_session, course_id=course.id, user_id=student.id)

    assert progress.progress_percentage == 50.0
    assert progress.is_completed is False
    assert progress.completed_lessons == 2
    assert progress.total_lessons == 4
    enrollment = crud_enrollment.get_by_user_and_course(db_session, user_id=student.id, course_id=course.id)
    assert Decimal(enrollment.progress_percentage) == Decimal("50.00")
    assert enrollment.completed_at is None


def test_completion_timestamp_is_set_once(db_session, course_factory, student):
    course = course_factory(lessons=2)
    enrollment_service.enroll(db_session, course_id=course.id, user_id=student.id)
    _mark_completed(db_session, student, course.lessons)

    first = enrollment_service.refresh_progress(db_session, course_id=course.id, user_id=student.id)
    enrollment = crud_enrollment.get_by_user_and_course(db_session, user_id=student.id, course_id=course.id)
    completed_at = enrollment.completed_at

    second = enrollment_service.refresh_progress(db_session, course_id=course.id, user_id=student.id)
    db_session.refresh(enrollment)

    assert first.is_completed is True
    assert first.progress_percentage == 100.0
    assert second.is_completed is True
    assert completed_at is not None
    assert enrollment.completed_at == completed_at


def test_course_without_lessons_counts_as_complete(db_session, course_factory, student):
    course = course_factory(lessons=0, unpublished_lessons=2)
    enrollment_service.enroll(db_session, course_id=course.id, user_id=student.id)
    _mark_completed(db_session, student, course.lessons[:1])

    progress = enrollment_service.refresh_progress(db_session, course_id=course.id, user_id=student.id)

    assert progress.progress_percentage == 100.0
    assert progress.is_completed is True
    assert progress.total_lessons == 0
    enrollment = crud_enrollment.get_by_user_and_course(db_session, user_id=student.id, course_id=course.id)
    assert enrollment.completed_at is not None


def test_unpublished_lessons_do_not_count(db_session, course_factory, student):
    course = course_factory(lessons=2, unpublished_lessons=1)
    enrollment_service.enroll(db_session, course_id=course.id, user_id=student.id)
    published = [lesson for lesson in course.lessons if lesson.is_published]
    _mark_completed(db_session, student, published)

    progress = enrollment_service.refresh_progress(db_session, course_id=course.id, user_id=student.id)

    assert progress.total_lessons == 2
    assert progress.completed_lessons == 2
    assert progress.is_completed is True


def test_refresh_without_enrollment_is_not_found(db_session, course_factory, student):
    course = course_factory(lessons=2)

    with pytest.raises(NotFoundError):
        enrollment_service.refresh_progress(db_session, course_id=course.id, user_id=student.id)


def test_list_my_courses_aggregates_counts(db_session, course_factory, student, instructor):
    first = course_factory(lessons=4, title="Learn Arabic for Beginners")
    second = course_factory(lessons=2, unpublished_lessons=1, title="German Grammar Mastery")
    enrollment_service.enroll(db_session, course_id=first.id, user_id=student.id)
    enrollment_service.enroll(db_session, course_id=second.id, user_id=student.id)
    _mark_completed(db_session, student, first.lessons[:1])

    courses = enrollment_service.list_my_courses(db_session, user_id=student.id)

    assert [c.course_id for c in courses] == [second.id, first.id]
    by_id = {c.course_id: c for c in courses}
    assert by_id[first.id].total_lessons == 4
    assert by_id[first.id].completed_lessons == 1
    assert by_id[first.id].progress_percentage == 25.0
    assert by_id[first.id].course_name == "Learn Arabic for Beginners"
    assert by_id[first.id].instructor_name == instructor.full_name
    assert by_id[second.id].total_lessons == 2
    assert by_id[second.id].completed_lessons == 0
    assert by_id[second.id].is_completed is False


def test_list_my_courses_empty(db_session, student):
    assert enrollment_service.list_my_courses(db_session, user_id=student.id) == []
