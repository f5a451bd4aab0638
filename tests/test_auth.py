# tests/test_auth.py

"""Tests for the authentication state holder."""

import unittest
from unittest.mock import MagicMock

from pricewatch.config.settings import Settings
from pricewatch.models.user import User
from pricewatch.services.api_client import ApiError
from pricewatch.services.auth import AuthState, AuthStatus
from pricewatch.services.session import Session
from pricewatch.ui import routes


class TestAuthState(unittest.TestCase):
    """Sign-in, sign-out and session restoration."""

    def setUp(self) -> None:
        self.session = Session()
        self.api = MagicMock()
        self.auth = AuthState(self.api, self.session)

    def test_initialize_anonymous(self) -> None:
        self.assertEqual(self.auth.initialize(), AuthStatus.ANONYMOUS)
        self.assertIsNone(self.auth.user)

    def test_initialize_restores_cached_user(self) -> None:
        self.session.store("tok", User(email="a@b.co", full_name="Ada"))
        self.assertEqual(self.auth.initialize(), AuthStatus.AUTHENTICATED)
        self.assertEqual(self.auth.user.display_name, "Ada")
        self.api.assert_not_called()

    def test_initialize_token_without_user_clears(self) -> None:
        self.session.storage.set_item(Settings.AUTH_TOKEN_KEY, "tok")
        with self.assertLogs("pricewatch.auth", level="ERROR"):
            status = self.auth.initialize()
        self.assertEqual(status, AuthStatus.ANONYMOUS)
        self.assertIsNone(self.session.token)

    def test_sign_in_stores_session(self) -> None:
        self.api.login.return_value = {
            "access_token": "tok",
            "user": {"email": "a@b.co", "user_metadata": {"full_name": "Ada"}},
        }
        result = self.auth.sign_in("a@b.co", "secret")
        self.assertTrue(result.ok)
        self.assertEqual(result.data.full_name, "Ada")
        self.assertEqual(self.session.token, "tok")
        self.assertEqual(self.auth.status, AuthStatus.AUTHENTICATED)

    def test_sign_in_without_user_object(self) -> None:
        self.api.login.return_value = {"access_token": "tok"}
        result = self.auth.sign_in("a@b.co", "secret")
        self.assertTrue(result.ok)
        self.assertEqual(self.auth.user.email, "a@b.co")

    def test_sign_in_missing_token_is_error(self) -> None:
        self.api.login.return_value = {"user": {"email": "a@b.co"}}
        result = self.auth.sign_in("a@b.co", "secret")
        self.assertFalse(result.ok)
        self.assertFalse(self.auth.is_authenticated)
        self.assertIsNone(self.session.token)

    def test_sign_in_api_error_never_raises(self) -> None:
        self.api.login.side_effect = ApiError("Invalid credentials", 400)
        result = self.auth.sign_in("a@b.co", "wrong")
        self.assertEqual(result.error, "Invalid credentials")
        self.assertEqual(self.auth.status, AuthStatus.ANONYMOUS)

    def test_sign_up_does_not_authenticate(self) -> None:
        self.api.register.return_value = {"id": "u1"}
        result = self.auth.sign_up("a@b.co", "secret", {"full_name": "Ada"})
        self.assertTrue(result.ok)
        self.api.register.assert_called_once_with(
            "a@b.co", "secret", {"full_name": "Ada"}
        )
        self.assertFalse(self.auth.is_authenticated)

    def test_sign_up_error(self) -> None:
        self.api.register.side_effect = ApiError("Email already registered", 400)
        result = self.auth.sign_up("a@b.co", "secret")
        self.assertEqual(result.error, "Email already registered")

    def test_sign_out_is_local_only(self) -> None:
        self.session.store("tok", User(email="a@b.co"))
        self.auth.initialize()
        result = self.auth.sign_out()
        self.assertTrue(result.ok)
        self.assertFalse(self.auth.is_authenticated)
        self.assertIsNone(self.session.token)
        self.assertEqual(self.api.method_calls, [])

    def test_reset_password(self) -> None:
        self.api.reset_password.return_value = {"message": "sent"}
        self.assertTrue(self.auth.reset_password("a@b.co").ok)
        self.api.reset_password.side_effect = ApiError("unknown email", 404)
        self.assertEqual(
            self.auth.reset_password("a@b.co").error, "unknown email"
        )

    def test_session_expiry_drops_user(self) -> None:
        self.session.store("tok", User(email="a@b.co"))
        self.auth.initialize()
        self.session.expire("401")
        self.assertFalse(self.auth.is_authenticated)
        self.assertEqual(self.auth.status, AuthStatus.ANONYMOUS)

    def test_external_storage_clear_redirects_to_login(self) -> None:
        """Deleting the stored token elsewhere logs the dashboard out."""
        self.session.store("tok", User(email="a@b.co"))
        self.auth.initialize()
        self.assertEqual(
            routes.resolve_route(routes.DASHBOARD, self.auth.is_authenticated),
            routes.DASHBOARD,
        )

        self.session.storage.clear()

        self.assertFalse(self.auth.is_authenticated)
        self.assertEqual(
            routes.resolve_route(routes.DASHBOARD, self.auth.is_authenticated),
            routes.LOGIN,
        )


if __name__ == "__main__":
    unittest.main()
