import unittest
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import patch

from fastapi.testclient import TestClient

from app.db.models import RoleEnum
from app.db.session import get_db
from app.deps.auth import get_current_user
from app.main import app
from app.services.user_service import DuplicateUserError, InvalidCredentialsError

BASE = "/api/v1/user"


def _fake_user(**overrides):
    base = {
        "id": "6f1c2a7e-0d7c-4f57-9a55-3d0f3c1e9b10",
        "user_name": "ana@example.com",
        "name": "Ana",
        "email": "ana@example.com",
        "password_hash": "$2b$12$not-a-real-hash",
        "role": RoleEnum.ADMIN,
        "created_at": datetime.now(timezone.utc),
    }
    base.update(overrides)
    return SimpleNamespace(**base)


class TestUserApi(unittest.TestCase):
    def setUp(self) -> None:
        self.client = TestClient(app)
        app.dependency_overrides[get_db] = lambda: iter([object()])

    def tearDown(self) -> None:
        app.dependency_overrides.clear()

    def test_register_returns_envelope(self) -> None:
        with patch("app.api.users.register_user", return_value=_fake_user()) as register:
            response = self.client.post(
                f"{BASE}/register",
                json={"user_name": "ana@example.com", "name": "Ana", "password": "pw-123456"},
            )

        self.assertEqual(response.status_code, 201)
        payload = response.json()
        self.assertTrue(payload["is_success"])
        self.assertEqual(payload["status_code"], 201)
        self.assertEqual(payload["error_messages"], [])
        self.assertEqual(payload["result"]["user_name"], "ana@example.com")
        self.assertNotIn("password_hash", payload["result"])
        self.assertIsNone(register.call_args.kwargs["role"])

    def test_register_duplicate_is_400(self) -> None:
        with patch(
            "app.api.users.register_user",
            side_effect=DuplicateUserError("ana@example.com"),
        ):
            response = self.client.post(
                f"{BASE}/register",
                json={"user_name": "ana@example.com", "name": "Ana", "password": "pw"},
            )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["code"], "USER_EXISTS")

    def test_register_requires_fields(self) -> None:
        response = self.client.post(f"{BASE}/register", json={"user_name": "ana"})
        self.assertEqual(response.status_code, 400)
        fields = {d["field"] for d in response.json()["error"]["details"]}
        self.assertEqual(fields, {"name", "password"})

    def test_register_rejects_unknown_role(self) -> None:
        response = self.client.post(
            f"{BASE}/register",
            json={"user_name": "ana", "name": "Ana", "password": "pw", "role": "Root"},
        )
        self.assertEqual(response.status_code, 400)

    def test_login_returns_token_and_role(self) -> None:
        with patch("app.api.users.login", return_value=(_fake_user(), "jwt-token")):
            response = self.client.post(
                f"{BASE}/login",
                json={"user_name": "ANA@example.com", "password": "pw-123456"},
            )

        self.assertEqual(response.status_code, 200)
        result = response.json()["result"]
        self.assertEqual(result["token"], "jwt-token")
        self.assertEqual(result["role"], "Admin")
        self.assertEqual(result["user"]["name"], "Ana")

    def test_login_bad_credentials_is_400(self) -> None:
        with patch("app.api.users.login", side_effect=InvalidCredentialsError()):
            response = self.client.post(
                f"{BASE}/login",
                json={"user_name": "ana", "password": "nope"},
            )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["code"], "INVALID_CREDENTIALS")

    def test_list_users_requires_admin(self) -> None:
        self.assertEqual(self.client.get(BASE).status_code, 401)

        app.dependency_overrides[get_current_user] = lambda: _fake_user(role=RoleEnum.REGISTERED)
        self.assertEqual(self.client.get(BASE).status_code, 403)

    def test_list_users_for_admin(self) -> None:
        app.dependency_overrides[get_current_user] = lambda: _fake_user()
        with patch("app.api.users.list_users", return_value=[_fake_user()]):
            response = self.client.get(BASE)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()[0]["role"], "Admin")
        self.assertNotIn("password_hash", response.json()[0])

    def test_get_user_404(self) -> None:
        app.dependency_overrides[get_current_user] = lambda: _fake_user()
        with patch("app.api.users.get_user", return_value=None):
            response = self.client.get(f"{BASE}/missing-id")

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"]["code"], "USER_NOT_FOUND")
