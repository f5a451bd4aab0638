# pricewatch/models/product.py

"""Tracked product model and the validated create/update payload."""

import math
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pricewatch.config.settings import Settings

ProductId = int | str

URL_PATTERN = re.compile(r"^https?://.+")


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp (``Z`` suffix allowed) or pass through."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _parse_price(data: dict[str, Any], key: str, default: float | None) -> float:
    raw = data.get(key)
    if raw is None or raw == "":
        if default is None:
            raise ValueError(f"Missing required field '{key}'")
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid number for '{key}': {raw!r}") from exc
    if not math.isfinite(value):
        raise ValueError(f"Non-finite number for '{key}': {raw!r}")
    return value


@dataclass
class Product:
    """A product the user is tracking against a target price."""

    id: ProductId
    name: str
    url: str
    target_price: float
    current_price: float = 0.0
    image: str = Settings.PLACEHOLDER_IMAGE
    last_checked: datetime | None = None
    is_demo: bool = False

    @property
    def target_reached(self) -> bool:
        """True once the current price is at or below the target."""
        return self.current_price <= self.target_price

    @property
    def status_label(self) -> str:
        return "Target reached" if self.target_reached else "Monitoring"

    @classmethod
    def from_api(cls, data: Any, is_demo: bool = False) -> "Product":
        """Build a Product from an API record.

        Raises ``ValueError`` when the record is not a dict or misses
        the id, name, url or target price.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Product record must be an object, got {type(data).__name__}")
        if data.get("id") is None:
            raise ValueError("Missing required field 'id'")
        name = str(data.get("name") or "").strip()
        if not name:
            raise ValueError("Missing required field 'name'")
        url = str(data.get("url") or "").strip()
        if not URL_PATTERN.match(url):
            raise ValueError(f"Invalid product URL: {url!r}")
        target_price = _parse_price(data, "target_price", None)
        if target_price <= 0:
            raise ValueError("target_price must be greater than 0")
        current_price = _parse_price(data, "current_price", 0.0)
        if current_price < 0:
            raise ValueError("current_price must not be negative")

        return cls(
            id=data["id"],
            name=name,
            url=url,
            target_price=target_price,
            current_price=current_price,
            image=data.get("image") or Settings.PLACEHOLDER_IMAGE,
            last_checked=parse_timestamp(data.get("last_checked")),
            is_demo=is_demo,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a JSON-friendly dict."""
        return {
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "current_price": self.current_price,
            "target_price": self.target_price,
            "image": self.image,
            "last_checked": (
                self.last_checked.isoformat() if self.last_checked else None
            ),
        }


@dataclass
class ProductDraft:
    """Validated form data for creating or editing a product.

    Produced by :func:`pricewatch.filters.form_validator.validate_product_form`;
    ``id`` is only set when editing.
    """

    name: str
    url: str
    target_price: float
    current_price: float = 0.0
    image: str = Settings.PLACEHOLDER_IMAGE
    id: ProductId | None = None

    def to_payload(self) -> dict[str, Any]:
        """Request body for ``POST /products/`` and ``PUT /products/{id}``."""
        payload: dict[str, Any] = {
            "name": self.name,
            "url": self.url,
            "current_price": self.current_price,
            "target_price": self.target_price,
            "image": self.image,
        }
        if self.id is not None:
            payload["id"] = self.id
        return payload
