# pricewatch/services/session.py

"""Single owner of the bearer token and cached user.

Both the API client and the auth state holder receive the same
:class:`Session`; neither touches local storage directly. Expiry
(a 401 from the API) goes through :meth:`Session.expire`, which clears
storage once and tells every listener, so the UI cannot keep rendering
protected content while another component thinks it is logged out.
"""

import json
import logging
from collections.abc import Callable

from pricewatch.config.settings import Settings
from pricewatch.models.user import User
from pricewatch.storage.local_storage import LocalStorage

logger = logging.getLogger("pricewatch.session")

ExpiryListener = Callable[[str], None]


class Session:
    """Token lifecycle backed by :class:`LocalStorage`."""

    def __init__(self, storage: LocalStorage | None = None) -> None:
        self.storage = storage or LocalStorage()
        self._listeners: list[ExpiryListener] = []

    @property
    def token(self) -> str | None:
        """The stored bearer token, read fresh on every access."""
        return self.storage.get_item(Settings.AUTH_TOKEN_KEY) or None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    @property
    def user(self) -> User | None:
        """The cached user object, or ``None`` if missing or malformed."""
        raw = self.storage.get_item(Settings.USER_KEY)
        if not raw:
            return None
        try:
            return User.from_api(json.loads(raw))
        except (json.JSONDecodeError, ValueError) as exc:
            logger.warning("Discarding malformed cached user: %s", exc)
            return None

    def store(self, token: str, user: User) -> None:
        """Persist a freshly issued token and its user."""
        self.storage.set_item(Settings.AUTH_TOKEN_KEY, token)
        self.storage.set_item(
            Settings.USER_KEY, json.dumps(user.to_dict(), ensure_ascii=False)
        )
        logger.info("Session stored for %s", user.email)

    def clear(self) -> None:
        self.storage.remove_item(Settings.AUTH_TOKEN_KEY)
        self.storage.remove_item(Settings.USER_KEY)
        logger.info("Session cleared")

    def expire(self, reason: str = "expired") -> None:
        """Clear the session and notify listeners (e.g. redirect to login)."""
        logger.warning("Session expired: %s", reason)
        self.clear()
        for listener in list(self._listeners):
            try:
                listener(reason)
            except Exception:
                logger.error("Session expiry listener failed", exc_info=True)

    def add_listener(self, listener: ExpiryListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: ExpiryListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def auth_headers(self) -> dict[str, str]:
        """``Authorization`` header for the current token, if any."""
        token = self.token
        return {"Authorization": f"Bearer {token}"} if token else {}
