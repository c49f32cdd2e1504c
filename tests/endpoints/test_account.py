from fastapi.testclient import TestClient

from app.core.security import create_access_token


def test_me(client: TestClient, student, auth_headers):
    response = client.get("/account/me", headers=auth_headers(student))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["id"] == student.id
    assert data["email"] == student.email
    assert data["role"] == "student"


def test_token_for_unknown_user(client: TestClient):
    token = create_access_token(987654)

    response = client.get("/account/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_token_without_numeric_subject(client: TestClient):
    from jose import jwt
    from app.core.config import settings

    token = jwt.encode({"sub": "someone@example.com"}, settings.SECRET_KEY, algorithm="HS256")

    response = client.get("/account/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
