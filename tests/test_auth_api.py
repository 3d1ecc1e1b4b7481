import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from support import make_app, register


class TestAuthEndpoints(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = TemporaryDirectory()

        from fastapi.testclient import TestClient

        self.app = make_app(Path(self._tmp.name))
        self.client = TestClient(self.app)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_register_then_login_returns_same_identity(self) -> None:
        r = self.client.post(
            "/api/auth/register", json={"email": "a@b.com", "password": "secret1", "name": "A"}
        )
        self.assertEqual(r.status_code, 201)
        body = r.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["message"], "User registered successfully")
        user = body["data"]["user"]
        self.assertEqual(user["email"], "a@b.com")
        self.assertEqual(user["name"], "A")
        self.assertNotIn("passwordHash", user)

        r = self.client.post("/api/auth/login", json={"email": "a@b.com", "password": "secret1"})
        self.assertEqual(r.status_code, 200)
        data = r.json()["data"]
        self.assertEqual(data["user"]["id"], user["id"])

        identity = self.app.state.context.identity.verify_token(data["token"])
        self.assertEqual(identity.id, user["id"])
        self.assertEqual(identity.email, "a@b.com")

    def test_login_is_case_insensitive_on_email(self) -> None:
        register(self.client, email="Mixed@Case.com")
        r = self.client.post("/api/auth/login", json={"email": "mixed@case.com", "password": "secret1"})
        self.assertEqual(r.status_code, 200)

    def test_register_duplicate_email(self) -> None:
        register(self.client)
        r = self.client.post(
            "/api/auth/register", json={"email": "a@b.com", "password": "other", "name": "B"}
        )
        self.assertEqual(r.status_code, 400)
        self.assertEqual(
            r.json(), {"success": False, "message": "User already exists with this email"}
        )

    def test_register_missing_fields(self) -> None:
        r = self.client.post("/api/auth/register", json={"email": "a@b.com"})
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["message"], "Please provide email, password, and name")

    def test_register_rejects_password_longer_than_72_bytes(self) -> None:
        r = self.client.post(
            "/api/auth/register", json={"email": "a@b.com", "password": "p" * 80, "name": "A"}
        )
        self.assertEqual(r.status_code, 400)
        self.assertEqual(
            r.json(), {"success": False, "message": "Password cannot be longer than 72 bytes"}
        )
        self.assertIsNone(self.app.state.context.users.find_by_email("a@b.com"))

        # Exactly 72 bytes is still accepted
        token, _ = register(self.client, password="p" * 72)
        self.assertTrue(token)
        r = self.client.post("/api/auth/login", json={"email": "a@b.com", "password": "p" * 80})
        self.assertEqual(r.status_code, 401)

    def test_login_rejects_bad_credentials(self) -> None:
        register(self.client)
        for payload in (
            {"email": "a@b.com", "password": "wrong"},
            {"email": "nobody@b.com", "password": "secret1"},
        ):
            r = self.client.post("/api/auth/login", json=payload)
            self.assertEqual(r.status_code, 401)
            self.assertEqual(r.json(), {"success": False, "message": "Invalid credentials"})

    def test_login_missing_fields(self) -> None:
        r = self.client.post("/api/auth/login", json={"email": "a@b.com"})
        self.assertEqual(r.status_code, 400)

    def test_malformed_body_is_400(self) -> None:
        r = self.client.post(
            "/api/auth/login", content=b"{not json", headers={"Content-Type": "application/json"}
        )
        self.assertEqual(r.status_code, 400)
        self.assertFalse(r.json()["success"])


if __name__ == "__main__":
    unittest.main()
