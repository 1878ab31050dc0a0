"""
Tests for the HTTP surface: auth, admin access, error mapping and the
service endpoints.
"""
import pytest

from app.core.exceptions import (
    AuthenticationError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
    WordcraftException,
)
from app.models import UserRole
from app.services import user_service


def register_payload(**overrides):
    payload = {
        "name": "Anna",
        "email": "Anna@Example.com",
        "password": "secret123",
        "base_language_code": "ru",
        "target_language_code": "en",
    }
    payload.update(overrides)
    return payload


class TestServiceEndpoints:

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["message"] == "Wordcraft API"

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}


class TestAuth:

    def test_register_lowercases_email(self, client):
        response = client.post("/api/v1/auth/register", json=register_payload())
        assert response.status_code == 201, response.text
        user = response.json()["user"]
        assert user["email"] == "anna@example.com"
        assert user["role"] == "user"
        assert "password" not in user

    def test_duplicate_email(self, client):
        client.post("/api/v1/auth/register", json=register_payload())
        response = client.post("/api/v1/auth/register", json=register_payload(email="anna@example.com"))
        assert response.status_code == 409
        assert response.json() == {"detail": "Email already exists", "type": "ConflictError"}

    def test_short_password_rejected_by_schema(self, client):
        response = client.post("/api/v1/auth/register", json=register_payload(password="123"))
        assert response.status_code == 422

    def test_unknown_language(self, client):
        response = client.post("/api/v1/auth/register", json=register_payload(target_language_code="xx"))
        assert response.status_code == 400
        assert response.json()["type"] == "ValidationError"

    def test_login(self, client):
        client.post("/api/v1/auth/register", json=register_payload())
        response = client.post("/api/v1/auth/login", json={"email": "ANNA@example.com", "password": "secret123"})
        assert response.status_code == 200
        assert response.json()["user"]["last_login"] is not None

    def test_login_with_wrong_password(self, client, user):
        response = client.post("/api/v1/auth/login", json={"email": user.email, "password": "wrong"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    def test_me(self, client, user):
        response = client.get(f"/api/v1/auth/me?user_id={user.id}")
        assert response.json()["id"] == user.id

    def test_me_for_missing_user(self, client):
        response = client.get("/api/v1/auth/me?user_id=404")
        assert response.status_code == 404

    def test_settings_are_merged(self, client, user):
        client.put(f"/api/v1/auth/settings?user_id={user.id}", json={"settings": {"theme": "dark"}})
        response = client.put(f"/api/v1/auth/settings?user_id={user.id}", json={"settings": {"sound": False}})
        assert response.json()["settings"] == {"theme": "dark", "sound": False}


class TestUserService:

    def test_short_password(self, session):
        with pytest.raises(ValidationError):
            user_service.register_user(session, "a@example.com", "123", "ru", "en")

    def test_deleted_user_cannot_log_in(self, session, user):
        user_service.soft_delete_user(session, user.id)
        with pytest.raises(AuthenticationError, match="deleted"):
            user_service.login_user(session, user.email, "secret123")

    def test_delete_user_data_keeps_account(self, session, user, make_entry):
        make_entry(user, "apple")
        counts = user_service.delete_user_data(session, user.id)
        assert counts["user_dictionary_deleted"] == 1
        assert user_service.get_user(session, user.id).id == user.id


class TestAdminUsers:

    def test_missing_admin_id(self, client):
        assert client.get("/api/v1/admin/users").status_code == 422

    def test_regular_user_is_forbidden(self, client, user):
        response = client.get(f"/api/v1/admin/users?admin_id={user.id}")
        assert response.status_code == 403
        assert response.json()["type"] == "AuthorizationError"

    def test_admin_lists_users(self, client, admin, user):
        response = client.get(f"/api/v1/admin/users?admin_id={admin.id}&role=user")
        assert response.status_code == 200
        assert [u["id"] for u in response.json()["users"]] == [user.id]

    def test_promote_and_soft_delete(self, client, admin, user):
        response = client.put(f"/api/v1/admin/users/{user.id}/role?admin_id={admin.id}", json={"role": "admin"})
        assert response.json()["role"] == UserRole.ADMIN.value

        response = client.delete(f"/api/v1/admin/users/{user.id}?admin_id={admin.id}")
        assert response.json()["deleted_at"] is not None

        response = client.post(f"/api/v1/admin/users/{user.id}/restore?admin_id={admin.id}")
        assert response.json()["deleted_at"] is None

    def test_user_with_stats(self, client, admin, user, make_entry):
        make_entry(user, "apple")
        body = client.get(f"/api/v1/admin/users/{user.id}?admin_id={admin.id}").json()
        assert body["total_words"] == 1
        assert body["words_by_status"] == {"notStarted": 1}


class TestLanguages:

    def test_lists_seeded_languages(self, client):
        response = client.get("/api/v1/languages")
        assert response.status_code == 200
        assert {"en", "da", "ru"} <= {lang["code"] for lang in response.json()["languages"]}

    def test_word_counts(self, client, make_definition):
        make_definition("apple")
        make_definition("pear")
        body = client.get("/api/v1/languages").json()
        counts = {lang["code"]: lang["word_count"] for lang in body["languages"]}
        assert counts["en"] == 2
        assert counts["da"] == 0
        assert body["total_count"] == len(body["languages"])

    def test_single_language(self, client):
        response = client.get("/api/v1/languages/DA")
        assert response.status_code == 200
        assert response.json()["code"] == "da"

    def test_unknown_language(self, client):
        response = client.get("/api/v1/languages/xx")
        assert response.status_code == 404
        assert response.json()["type"] == "NotFoundError"


class TestErrorStatusCodes:

    @pytest.mark.parametrize("error,code", [
        (ValidationError, 400),
        (NotFoundError, 404),
        (ConflictError, 409),
        (ExternalServiceError, 502),
        (WordcraftException, 500),
    ])
    def test_each_error_declares_its_status(self, error, code):
        assert error("boom").status_code == code
