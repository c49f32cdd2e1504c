from fastapi.testclient import TestClient


def test_watch_time(client: TestClient, course_factory, student, auth_headers):
    course = course_factory(lessons=1)
    headers = auth_headers(student)
    client.post(f"/enrollment/enroll/{course.id}", headers=headers)
    lesson_id = course.lessons[0].id

    client.put(f"/progress/lessons/{lesson_id}/watch", json={"watched_seconds": 90}, headers=headers)
    response = client.put(f"/progress/lessons/{lesson_id}/watch", json={"watched_seconds": 30}, headers=headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["watched_seconds"] == 90
    assert data["lesson_id"] == lesson_id


def test_negative_watch_time_is_a_validation_error(client: TestClient, course_factory, student, auth_headers):
    course = course_factory(lessons=1)
    headers = auth_headers(student)
    client.post(f"/enrollment/enroll/{course.id}", headers=headers)

    response = client.put(
        f"/progress/lessons/{course.lessons[0].id}/watch", json={"watched_seconds": -5}, headers=headers
    )

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_complete_lesson_without_enrollment(client: TestClient, course_factory, student, auth_headers):
    course = course_factory(lessons=1)

    response = client.post(f"/progress/lessons/{course.lessons[0].id}/complete", headers=auth_headers(student))

    assert response.status_code == 404


def test_completing_the_last_lesson_completes_the_course(client: TestClient, course_factory, student, auth_headers):
    course = course_factory(lessons=2)
    headers = auth_headers(student)
    client.post(f"/enrollment/enroll/{course.id}", headers=headers)

    client.post(f"/progress/lessons/{course.lessons[0].id}/complete", headers=headers)
    response = client.post(f"/progress/lessons/{course.lessons[1].id}/complete", headers=headers)

    data = response.json()["data"]
    assert data["is_completed"] is True
    assert data["progress_percentage"] == 100.0
