# tests/test_price_history.py

"""Tests for price history loading and the synthetic fallback series."""

import random
import unittest
from datetime import date, timedelta
from unittest.mock import MagicMock

from pricewatch.models.price_point import PricePoint
from pricewatch.models.product import Product
from pricewatch.services.api_client import ApiError
from pricewatch.services.price_history import (
    CancellationToken,
    PriceHistoryService,
    generate_fallback_history,
    price_change,
)


def _product(current: float = 100.0) -> Product:
    return Product(
        id=1, name="Kettle", url="https://x.com/k",
        target_price=80.0, current_price=current,
    )


class TestGenerateFallbackHistory(unittest.TestCase):

    def test_length_and_endpoints(self) -> None:
        end = date(2026, 2, 14)
        for days in (7, 30, 90):
            with self.subTest(days=days):
                points = generate_fallback_history(
                    100.0, days, end=end, rng=random.Random(1)
                )
                self.assertEqual(len(points), days + 1)
                self.assertEqual(points[-1].price, 100.0)
                self.assertEqual(points[-1].date, end)
                self.assertEqual(points[0].date, end - timedelta(days=days))
                self.assertAlmostEqual(points[0].price, 110.0)

    def test_points_are_daily_and_synthetic(self) -> None:
        points = generate_fallback_history(50.0, 7, rng=random.Random(2))
        for earlier, later in zip(points, points[1:]):
            self.assertEqual(later.date - earlier.date, timedelta(days=1))
        self.assertTrue(all(p.synthetic for p in points))

    def test_interior_points_within_jitter(self) -> None:
        points = generate_fallback_history(100.0, 10, rng=random.Random(3))
        for i, point in enumerate(points[1:-1], start=1):
            base = 110.0 + (100.0 - 110.0) * i / 10
            self.assertGreaterEqual(point.price, round(base * 0.98, 2) - 0.01)
            self.assertLessEqual(point.price, round(base * 1.02, 2) + 0.01)

    def test_non_positive_days_rejected(self) -> None:
        with self.assertRaises(ValueError):
            generate_fallback_history(100.0, 0)


class TestPriceChange(unittest.TestCase):

    def test_change_and_percent(self) -> None:
        points = [
            PricePoint(date(2026, 1, 1), 200.0),
            PricePoint(date(2026, 1, 2), 150.0),
        ]
        self.assertEqual(price_change(points), (-50.0, -25.0))

    def test_too_few_points(self) -> None:
        self.assertEqual(price_change([]), (0.0, 0.0))


class TestPriceHistoryService(unittest.TestCase):

    def setUp(self) -> None:
        self.api = MagicMock()
        self.service = PriceHistoryService(
            self.api, offline_fallback=True, rng=random.Random(0)
        )

    def test_real_history_sorted_and_trimmed(self) -> None:
        latest = date(2026, 2, 14)
        raw = [
            {"date": (latest - timedelta(days=d)).isoformat(), "price": 100 + d}
            for d in (0, 3, 10, 40)
        ]
        self.api.get_price_history.return_value = raw
        result = self.service.load(_product(), "7d")
        self.assertFalse(result.synthetic)
        self.assertEqual(
            [p.date for p in result.points],
            [latest - timedelta(days=3), latest],
        )

    def test_dict_wrapped_history(self) -> None:
        self.api.get_price_history.return_value = {
            "history": [
                {"date": "2026-02-13", "price": 10},
                {"date": "2026-02-14", "price": 9},
            ]
        }
        result = self.service.load(_product(), "30d")
        self.assertEqual(len(result.points), 2)

    def test_empty_history_falls_back(self) -> None:
        self.api.get_price_history.return_value = []
        result = self.service.load(_product(80.0), "30d")
        self.assertTrue(result.synthetic)
        self.assertEqual(len(result.points), 31)
        self.assertEqual(result.points[-1].price, 80.0)
        self.assertIsNone(result.error)

    def test_api_error_falls_back_and_keeps_error(self) -> None:
        self.api.get_price_history.side_effect = ApiError("HTTP error! status: 404", 404)
        result = self.service.load(_product(), "7d")
        self.assertTrue(result.synthetic)
        self.assertEqual(len(result.points), 8)
        self.assertEqual(result.error, "HTTP error! status: 404")

    def test_fallback_disabled(self) -> None:
        service = PriceHistoryService(self.api, offline_fallback=False)
        self.api.get_price_history.return_value = []
        result = service.load(_product(), "7d")
        self.assertEqual(result.points, [])
        self.assertEqual(result.error, "No price history available")

    def test_unknown_range_uses_default(self) -> None:
        self.api.get_price_history.return_value = []
        result = self.service.load(_product(), "1y")
        self.assertEqual(result.range_key, "7d")
        self.assertEqual(len(result.points), 8)

    def test_cancelled_request_returns_nothing(self) -> None:
        token = CancellationToken()

        def fetch(_product_id):
            token.cancel()
            return [{"date": "2026-02-14", "price": 1}]

        self.api.get_price_history.side_effect = fetch
        result = self.service.load(_product(), "7d", token=token)
        self.assertTrue(result.cancelled)
        self.assertEqual(result.points, [])


class TestCancellationToken(unittest.TestCase):

    def test_cancel(self) -> None:
        token = CancellationToken()
        self.assertFalse(token.cancelled)
        token.cancel()
        self.assertTrue(token.cancelled)


if __name__ == "__main__":
    unittest.main()
