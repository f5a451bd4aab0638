# pricewatch/models/notification.py

"""Price alert notifications and the user's notification preferences."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pricewatch.models.product import ProductId, parse_timestamp


@dataclass
class Notification:
    """A price alert delivered by the server."""

    id: int | str
    message: str
    read: bool = False
    created_at: datetime | None = None
    product_id: ProductId | None = None

    @classmethod
    def from_api(cls, data: Any) -> "Notification":
        if not isinstance(data, dict) or data.get("id") is None:
            raise ValueError("Notification record must be an object with an id")
        return cls(
            id=data["id"],
            message=str(data.get("message") or data.get("title") or ""),
            read=bool(data.get("read", data.get("is_read", False))),
            created_at=parse_timestamp(data.get("created_at")),
            product_id=data.get("product_id"),
        )


@dataclass
class UserSettings:
    """Notification preferences stored at ``/user/settings``.

    Keys the dashboard does not know about are kept in ``extra`` and
    sent back untouched on save.
    """

    email_notifications: bool = True
    push_notifications: bool = False
    check_interval_hours: int = 1
    extra: dict[str, Any] = field(
        default_factory=lambda: dict[str, Any]()
    )

    _KNOWN = ("email_notifications", "push_notifications", "check_interval_hours")

    @classmethod
    def from_api(cls, data: Any) -> "UserSettings":
        if not isinstance(data, dict):
            raise ValueError("Settings must be an object")
        return cls(
            email_notifications=bool(data.get("email_notifications", True)),
            push_notifications=bool(data.get("push_notifications", False)),
            check_interval_hours=int(data.get("check_interval_hours", 1)),
            extra={k: v for k, v in data.items() if k not in cls._KNOWN},
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            **self.extra,
            "email_notifications": self.email_notifications,
            "push_notifications": self.push_notifications,
            "check_interval_hours": self.check_interval_hours,
        }
