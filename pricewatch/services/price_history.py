# pricewatch/services/price_history.py

"""Price history loading with a synthetic fallback series."""

import logging
import random
import threading
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any

from pricewatch.config.settings import Settings
from pricewatch.models.price_point import PricePoint
from pricewatch.models.product import Product, ProductId
from pricewatch.services.api_client import ApiClient

logger = logging.getLogger("pricewatch.history")


def generate_fallback_history(
    current_price: float,
    days: int,
    *,
    end: date | None = None,
    rng: random.Random | None = None,
) -> list[PricePoint]:
    """Synthesise a daily, roughly descending series ending at *current_price*.

    Returns ``days + 1`` points from ``end - days`` to ``end``. The first
    point is ``current_price * FALLBACK_START_FACTOR``, the last is
    ``current_price`` exactly, and interior points follow the straight
    line between them with a random jitter from ``FALLBACK_JITTER``.
    Every point is marked ``synthetic``.
    """
    if days <= 0:
        raise ValueError(f"days must be positive, got {days}")
    end = end or date.today()
    rng = rng or random.Random()
    low, high = Settings.FALLBACK_JITTER
    start_price = current_price * Settings.FALLBACK_START_FACTOR

    points: list[PricePoint] = []
    for i in range(days + 1):
        day = end - timedelta(days=days - i)
        if i == days:
            price = current_price
        else:
            base = start_price + (current_price - start_price) * i / days
            factor = 1.0 if i == 0 else rng.uniform(low, high)
            price = round(base * factor, 2)
        points.append(PricePoint(date=day, price=price, synthetic=True))
    return points


def price_change(points: list[PricePoint]) -> tuple[float, float]:
    """Absolute and percentage change between the first and last point."""
    if len(points) < 2:
        return 0.0, 0.0
    first, last = points[0].price, points[-1].price
    change = last - first
    percent = (change / first * 100) if first else 0.0
    return change, percent


class CancellationToken:
    """Flag a caller flips when the result of a request is no longer wanted."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass
class HistoryResult:
    """Price series for one product and range, or why there is none."""

    product_id: ProductId | None = None
    range_key: str = Settings.DEFAULT_HISTORY_RANGE
    points: list[PricePoint] = field(
        default_factory=lambda: list[PricePoint]()
    )
    synthetic: bool = False
    error: str | None = None
    cancelled: bool = False


def _extract_points(raw: Any) -> list[PricePoint]:
    if isinstance(raw, dict):
        raw = raw.get("history", raw.get("price_history"))
    if not isinstance(raw, list):
        return []
    points: list[PricePoint] = []
    for item in raw:
        try:
            points.append(PricePoint.from_api(item))
        except ValueError as exc:
            logger.debug("Skipping malformed price point %r: %s", item, exc)
    return points


class PriceHistoryService:
    """Fetches real history and falls back to a synthetic series."""

    def __init__(
        self,
        api: ApiClient,
        offline_fallback: bool | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.api = api
        self.offline_fallback = (
            Settings.OFFLINE_FALLBACK_ENABLED
            if offline_fallback is None
            else offline_fallback
        )
        self._rng = rng or random.Random()

    def load(
        self,
        product: Product,
        range_key: str = Settings.DEFAULT_HISTORY_RANGE,
        token: CancellationToken | None = None,
    ) -> HistoryResult:
        """Load the series for *product* over *range_key* (``7d``/``30d``/``90d``).

        If *token* is cancelled while the request is in flight the
        result is flagged ``cancelled`` and carries no points.
        """
        if range_key not in Settings.HISTORY_RANGES:
            logger.warning("Unknown history range %r, using default", range_key)
            range_key = Settings.DEFAULT_HISTORY_RANGE
        days = Settings.HISTORY_RANGES[range_key]
        result = HistoryResult(product_id=product.id, range_key=range_key)

        try:
            points = _extract_points(self.api.get_price_history(product.id))
        except Exception as exc:
            logger.warning(
                "Price history fetch failed for product %s: %s",
                product.id,
                exc,
            )
            points = []
            result.error = str(exc)

        if token is not None and token.cancelled:
            logger.debug("Discarding stale history for product %s", product.id)
            result.cancelled = True
            return result

        if points:
            points.sort(key=lambda p: p.date)
            cutoff = points[-1].date - timedelta(days=days)
            result.points = [p for p in points if p.date >= cutoff]
            return result

        if not self.offline_fallback:
            result.error = result.error or "No price history available"
            return result

        logger.info(
            "Using synthetic %s history for product %s", range_key, product.id
        )
        result.points = generate_fallback_history(
            product.current_price, days, rng=self._rng
        )
        result.synthetic = True
        return result
