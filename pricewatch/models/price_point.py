# pricewatch/models/price_point.py

"""Dated price observation used by the price chart."""

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any


@dataclass
class PricePoint:
    """A single price observation on a given day.

    ``synthetic`` marks points generated client-side when no real
    history is available, so charts can label them as such.
    """

    date: date
    price: float
    synthetic: bool = False

    @classmethod
    def from_api(cls, data: Any) -> "PricePoint":
        """Parse a ``{date, price}`` record; raises ``ValueError`` if malformed."""
        if not isinstance(data, dict):
            raise ValueError("Price point must be an object")
        raw_date = data.get("date")
        if isinstance(raw_date, datetime):
            day = raw_date.date()
        elif isinstance(raw_date, date):
            day = raw_date
        elif isinstance(raw_date, str) and raw_date:
            day = date.fromisoformat(raw_date[:10])
        else:
            raise ValueError(f"Invalid price point date: {raw_date!r}")
        try:
            price = float(data["price"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError("Invalid price point price") from exc
        if not math.isfinite(price):
            raise ValueError(f"Non-finite price point price: {price!r}")
        return cls(date=day, price=price)
