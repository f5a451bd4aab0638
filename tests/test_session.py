# tests/test_session.py

"""Tests for the token-owning Session."""

import unittest
from unittest.mock import MagicMock

from pricewatch.config.settings import Settings
from pricewatch.models.user import User
from pricewatch.services.session import Session


class TestSession(unittest.TestCase):
    """Token storage, expiry and listener notification."""

    def setUp(self) -> None:
        self.session = Session()

    def test_anonymous_by_default(self) -> None:
        self.assertIsNone(self.session.token)
        self.assertIsNone(self.session.user)
        self.assertFalse(self.session.is_authenticated)
        self.assertEqual(self.session.auth_headers(), {})

    def test_store_persists_token_and_user(self) -> None:
        self.session.store("tok", User(email="a@b.co", full_name="Ada"))
        self.assertEqual(self.session.token, "tok")
        self.assertEqual(self.session.user, User(email="a@b.co", full_name="Ada"))
        self.assertEqual(
            self.session.auth_headers(), {"Authorization": "Bearer tok"}
        )
        # a fresh Session over the same file sees the login
        self.assertTrue(Session().is_authenticated)

    def test_clear(self) -> None:
        self.session.store("tok", User(email="a@b.co"))
        self.session.clear()
        self.assertFalse(self.session.is_authenticated)
        self.assertIsNone(self.session.user)

    def test_external_clear_is_visible(self) -> None:
        self.session.store("tok", User(email="a@b.co"))
        self.session.storage.remove_item(Settings.AUTH_TOKEN_KEY)
        self.assertFalse(self.session.is_authenticated)

    def test_malformed_user_is_none(self) -> None:
        self.session.storage.set_item(Settings.USER_KEY, "{broken")
        self.assertIsNone(self.session.user)

    def test_expire_clears_and_notifies(self) -> None:
        listener = MagicMock()
        self.session.add_listener(listener)
        self.session.store("tok", User(email="a@b.co"))
        self.session.expire("401")
        self.assertFalse(self.session.is_authenticated)
        listener.assert_called_once_with("401")

    def test_failing_listener_does_not_block_others(self) -> None:
        broken = MagicMock(side_effect=RuntimeError("boom"))
        healthy = MagicMock()
        self.session.add_listener(broken)
        self.session.add_listener(healthy)
        with self.assertLogs("pricewatch.session", level="ERROR"):
            self.session.expire()
        healthy.assert_called_once_with("expired")

    def test_listener_registered_once_and_removable(self) -> None:
        listener = MagicMock()
        self.session.add_listener(listener)
        self.session.add_listener(listener)
        self.session.expire()
        self.assertEqual(listener.call_count, 1)
        self.session.remove_listener(listener)
        self.session.expire()
        self.assertEqual(listener.call_count, 1)


if __name__ == "__main__":
    unittest.main()
