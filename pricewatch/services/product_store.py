# pricewatch/services/product_store.py

"""In-memory product list for one dashboard session."""

import logging
import threading
import time
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

from pricewatch.config.settings import Settings
from pricewatch.models.product import Product, ProductDraft, ProductId
from pricewatch.models.stats import DashboardStats
from pricewatch.services.api_client import ApiClient
from pricewatch.services.stats import calculate_stats

logger = logging.getLogger("pricewatch.store")

_id_lock = threading.Lock()
_last_local_id = 0


def next_local_id() -> int:
    """Millisecond timestamp id, strictly increasing within the process."""
    global _last_local_id
    with _id_lock:
        candidate = int(time.time() * 1000)
        _last_local_id = max(candidate, _last_local_id + 1)
        return _last_local_id


def demo_products() -> list[Product]:
    """Fresh copies of the demonstration dataset."""
    now = datetime.now()
    products = [
        Product.from_api(record, is_demo=True)
        for record in Settings.DEMO_PRODUCTS
    ]
    for p in products:
        p.last_checked = now
    return products


@dataclass
class StoreResult:
    """Outcome of a store operation.

    ``source`` is ``"api"`` when the server answered, ``"fallback"``
    when locally synthesised data was used and ``"local"`` when only
    the in-memory list changed.
    """

    ok: bool
    source: str = "api"
    product: Product | None = None
    message: str = ""
    error: str | None = None


class ProductStore:
    """Holds the tracked products and reconciles them with the API.

    No method raises: API failures are logged and either downgraded to
    local fallback data (``offline_fallback=True``) or reported through
    :class:`StoreResult` with the list left as it was.

    Operations may run on worker threads. API calls happen outside
    ``_lock``; every change to ``products`` and ``selected`` happens
    under it.
    """

    def __init__(
        self,
        api: ApiClient,
        offline_fallback: bool | None = None,
    ) -> None:
        self.api = api
        self.offline_fallback = (
            Settings.OFFLINE_FALLBACK_ENABLED
            if offline_fallback is None
            else offline_fallback
        )
        self.products: list[Product] = []
        self.selected: Product | None = None
        self.using_demo_data: bool = False
        self._lock = threading.Lock()

    # ── Queries ─────────────────────────────────────────

    def get(self, product_id: ProductId) -> Product | None:
        return next((p for p in self.products if p.id == product_id), None)

    def select(self, product_id: ProductId | None) -> Product | None:
        with self._lock:
            self.selected = (
                self.get(product_id) if product_id is not None else None
            )
            return self.selected

    def stats(self) -> DashboardStats:
        return calculate_stats(self.products)

    # ── Operations ──────────────────────────────────────

    def load(self) -> StoreResult:
        """Replace the list with the server's, or the demo dataset."""
        error: str | None = None
        try:
            raw = self.api.get_products()
            products = _parse_products(raw)
            if products:
                with self._lock:
                    self.products = products
                    self.using_demo_data = False
                    self._refresh_selection()
                logger.info("Loaded %d products from API", len(products))
                return StoreResult(
                    ok=True, message=f"Loaded {len(products)} products"
                )
            error = "API returned no products"
        except Exception as exc:
            logger.warning("API fetch failed: %s", exc, exc_info=True)
            error = str(exc)

        if not self.offline_fallback:
            with self._lock:
                self.products = []
                self.selected = None
                self.using_demo_data = False
            return StoreResult(
                ok=False,
                source="local",
                message="Could not load products",
                error=error,
            )

        logger.warning("Using demo products (%s)", error)
        with self._lock:
            self.products = demo_products()
            self.using_demo_data = True
            self._refresh_selection()
        return StoreResult(
            ok=True,
            source="fallback",
            message="Showing demo products (API unavailable)",
            error=error,
        )

    def add(self, draft: ProductDraft) -> StoreResult:
        """Create a product and put it at the top of the list."""
        try:
            product = Product.from_api(self.api.create_product(draft))
            source = "api"
            error = None
        except Exception as exc:
            logger.warning("API create failed: %s", exc, exc_info=True)
            if not self.offline_fallback:
                return StoreResult(
                    ok=False,
                    source="local",
                    message="Could not add product",
                    error=str(exc),
                )
            product = Product(
                id=next_local_id(),
                name=draft.name,
                url=draft.url,
                target_price=draft.target_price,
                current_price=draft.current_price,
                image=draft.image,
                last_checked=datetime.now(),
                is_demo=True,
            )
            source = "fallback"
            error = str(exc)

        with self._lock:
            self.products.insert(0, product)
        logger.info("Added product %s (%s)", product.id, source)
        return StoreResult(
            ok=True,
            source=source,
            product=product,
            message="Product added",
            error=error,
        )

    def update(self, draft: ProductDraft) -> StoreResult:
        """Replace the product with ``draft.id`` in place."""
        if draft.id is None:
            return StoreResult(
                ok=False,
                source="local",
                message="Could not update product",
                error="Missing product id",
            )
        existing = self.get(draft.id)
        try:
            product = Product.from_api(self.api.update_product(draft.id, draft))
            source = "api"
            error = None
        except Exception as exc:
            logger.warning("API update failed: %s", exc, exc_info=True)
            if not self.offline_fallback:
                return StoreResult(
                    ok=False,
                    source="local",
                    message="Could not update product",
                    error=str(exc),
                )
            product = _merge_locally(existing, draft)
            source = "fallback"
            error = str(exc)

        with self._lock:
            self.products = [
                product if p.id == product.id else p for p in self.products
            ]
            if self.selected is not None and self.selected.id == product.id:
                self.selected = product
        logger.info("Updated product %s (%s)", product.id, source)
        return StoreResult(
            ok=True,
            source=source,
            product=product,
            message="Product updated",
            error=error,
        )

    def remove(self, product_id: ProductId) -> StoreResult:
        """Delete a product; the local removal is never rolled back."""
        error: str | None = None
        try:
            self.api.delete_product(product_id)
        except Exception as exc:
            logger.warning(
                "API delete failed, proceeding with local delete: %s", exc
            )
            error = str(exc)

        with self._lock:
            removed = self.get(product_id)
            self.products = [p for p in self.products if p.id != product_id]
            if self.selected is not None and self.selected.id == product_id:
                self.selected = None
        return StoreResult(
            ok=True,
            source="api" if error is None else "local",
            product=removed,
            message="Product removed",
            error=error,
        )

    def _refresh_selection(self) -> None:
        if self.selected is not None:
            self.selected = self.get(self.selected.id)


def _parse_products(raw: Any) -> list[Product]:
    if not isinstance(raw, list):
        raise ValueError(f"Expected a product list, got {type(raw).__name__}")
    products: list[Product] = []
    for record in raw:
        try:
            products.append(Product.from_api(record))
        except ValueError as exc:
            logger.warning("Skipping malformed product record: %s", exc)
    return products


def _merge_locally(existing: Product | None, draft: ProductDraft) -> Product:
    """Apply the submitted fields on top of *existing*; the URL never changes."""
    now = datetime.now()
    if existing is None:
        return Product(
            id=draft.id if draft.id is not None else next_local_id(),
            name=draft.name,
            url=draft.url,
            target_price=draft.target_price,
            current_price=draft.current_price,
            image=draft.image,
            last_checked=now,
        )
    return replace(
        existing,
        name=draft.name,
        target_price=draft.target_price,
        current_price=draft.current_price,
        image=draft.image or existing.image,
        last_checked=now,
    )
