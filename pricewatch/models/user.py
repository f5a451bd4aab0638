# pricewatch/models/user.py

"""Signed-in user profile as cached in local storage."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class User:
    """The authenticated user."""

    email: str
    full_name: str | None = None
    extra: dict[str, Any] = field(
        default_factory=lambda: dict[str, Any]()
    )

    @property
    def display_name(self) -> str:
        return self.full_name or self.email or "User"

    @classmethod
    def from_api(cls, data: Any) -> "User":
        """Build a User from the ``user`` object of a login response.

        Accepts a top-level ``full_name`` or the nested
        ``user_metadata.full_name`` shape.
        """
        if not isinstance(data, dict):
            raise ValueError("User record must be an object")
        email = data.get("email")
        if not email:
            raise ValueError("User record has no email")
        metadata = data.get("user_metadata") or {}
        full_name = data.get("full_name") or (
            metadata.get("full_name") if isinstance(metadata, dict) else None
        )
        extra = {
            k: v
            for k, v in data.items()
            if k not in {"email", "full_name"}
        }
        return cls(email=str(email), full_name=full_name, extra=extra)

    def to_dict(self) -> dict[str, Any]:
        return {**self.extra, "email": self.email, "full_name": self.full_name}
