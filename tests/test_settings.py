# tests/test_settings.py

"""Tests for the Settings configuration class."""

import os
import unittest
from pathlib import Path
from unittest.mock import patch

from pricewatch.config.settings import Settings, _env_flag, _env_int


class TestSettings(unittest.TestCase):
    """Verify Settings constants and the demo dataset."""

    def test_api_base_url_has_no_trailing_slash(self) -> None:
        """Endpoints are appended with a leading slash."""
        self.assertFalse(Settings.API_BASE_URL.endswith("/"))
        self.assertRegex(Settings.API_BASE_URL, r"^https?://")

    def test_request_timeout_is_positive_int(self) -> None:
        self.assertIsInstance(Settings.REQUEST_TIMEOUT, int)
        self.assertGreater(Settings.REQUEST_TIMEOUT, 0)

    def test_history_ranges(self) -> None:
        """The chart offers 7, 30 and 90 day windows."""
        self.assertEqual(
            Settings.HISTORY_RANGES, {"7d": 7, "30d": 30, "90d": 90}
        )
        self.assertIn(
            Settings.DEFAULT_HISTORY_RANGE, Settings.HISTORY_RANGES
        )

    def test_jitter_bounds(self) -> None:
        low, high = Settings.FALLBACK_JITTER
        self.assertEqual((low, high), (0.98, 1.02))

    def test_storage_keys(self) -> None:
        self.assertEqual(Settings.AUTH_TOKEN_KEY, "auth_token")
        self.assertEqual(Settings.USER_KEY, "user")

    def test_demo_products_are_valid(self) -> None:
        """Every demo record has a positive target and an http(s) URL."""
        self.assertEqual(len(Settings.DEMO_PRODUCTS), 3)
        ids = [p["id"] for p in Settings.DEMO_PRODUCTS]
        self.assertEqual(len(ids), len(set(ids)))
        for record in Settings.DEMO_PRODUCTS:
            with self.subTest(name=record["name"]):
                self.assertGreater(record["target_price"], 0)
                self.assertRegex(record["url"], r"^https?://.+")

    def test_path_constants_are_paths(self) -> None:
        self.assertIsInstance(Settings.BASE_DIR, Path)
        self.assertIsInstance(Settings.DATA_DIR, Path)
        self.assertIsInstance(Settings.STORAGE_PATH, Path)
        self.assertIsInstance(Settings.EXPORTS_DIR, Path)
        self.assertIsInstance(Settings.LOGS_DIR, Path)


class TestEnvHelpers(unittest.TestCase):
    """Environment parsing helpers."""

    def test_flag_truthy_values(self) -> None:
        for raw in ("1", "true", "TRUE", "yes", "on"):
            with self.subTest(raw=raw):
                with patch.dict(os.environ, {"PW_TEST_FLAG": raw}):
                    self.assertTrue(_env_flag("PW_TEST_FLAG", False))

    def test_flag_falsy_values(self) -> None:
        for raw in ("0", "false", "no", "off"):
            with self.subTest(raw=raw):
                with patch.dict(os.environ, {"PW_TEST_FLAG": raw}):
                    self.assertFalse(_env_flag("PW_TEST_FLAG", True))

    def test_flag_default_when_unset(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            self.assertTrue(_env_flag("PW_TEST_FLAG", True))

    def test_int_ignores_junk(self) -> None:
        with patch.dict(os.environ, {"PW_TEST_INT": "abc"}):
            self.assertEqual(_env_int("PW_TEST_INT", 7), 7)
        with patch.dict(os.environ, {"PW_TEST_INT": "30"}):
            self.assertEqual(_env_int("PW_TEST_INT", 7), 30)


if __name__ == "__main__":
    unittest.main()
