"""
Integration Tests for Registration, Login and Token Identity
"""

from fastapi import status


class TestAuthenticationWorkflow:
    """Test the account lifecycle through the HTTP API"""

    def test_register_login_and_identify(self, client):
        response = client.post(
            "/api/v1/auth/register",
            json={"username": "Dana", "password": "pass1234", "name": "Dana", "role": "teacher"},
        )
        assert response.status_code == status.HTTP_201_CREATED
        registered = response.json()
        assert registered["username"] == "dana"
        assert registered["role"] == "teacher"
        assert "password" not in registered

        response = client.post("/api/v1/auth/login", json={"username": "dana", "password": "pass1234"})
        assert response.status_code == status.HTTP_200_OK
        login = response.json()
        assert login["role"] == "teacher"
        assert login["userId"] == registered["id"]

        response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {login['token']}"})
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["userId"] == registered["id"]

    def test_bare_token_accepted(self, client, student, headers_for):
        token = headers_for(student)["Authorization"].split(" ", 1)[1]

        response = client.get("/api/v1/auth/me", headers={"Authorization": token})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["role"] == "student"

    def test_duplicate_username(self, client, student):
        response = client.post(
            "/api/v1/auth/register", json={"username": "alice", "password": "pass1234", "name": "Alice Again"}
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["code"] == "USERNAME_TAKEN"

    def test_self_registration_cannot_create_admin(self, client):
        response = client.post(
            "/api/v1/auth/register",
            json={"username": "mallory", "password": "pass1234", "name": "Mallory", "role": "admin"},
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_wrong_password(self, client, student):
        response = client.post("/api/v1/auth/login", json={"username": "alice", "password": "wrong999"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"] == "Invalid username or password"

    def test_unknown_user_gets_same_error(self, client):
        response = client.post("/api/v1/auth/login", json={"username": "nobody", "password": "wrong999"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["code"] == "INVALID_CREDENTIALS"

    def test_missing_and_invalid_tokens(self, client):
        assert client.get("/api/v1/auth/me").status_code == status.HTTP_401_UNAUTHORIZED

        response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["code"] == "UNAUTHENTICATED"

    def test_error_body_carries_request_ids(self, client):
        response = client.get("/api/v1/auth/me")
        body = response.json()

        assert body["success"] is False
        assert body["request_id"] is not None
        assert response.headers["X-Correlation-ID"] == body["correlation_id"]
