# pricewatch/services/notifications.py

"""Notification list, read acknowledgements and alert preferences."""

import logging

from pricewatch.models.notification import Notification, UserSettings
from pricewatch.services.api_client import ApiClient

logger = logging.getLogger("pricewatch.notifications")


class NotificationCenter:
    """Keeps the user's notifications and settings in memory.

    Like the product store, failures are logged and reported as
    ``False``/``None`` rather than raised.
    """

    def __init__(self, api: ApiClient) -> None:
        self.api = api
        self.notifications: list[Notification] = []
        self.settings: UserSettings | None = None
        self.last_error: str | None = None

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self.notifications if not n.read)

    def refresh(self) -> bool:
        """Reload notifications; the previous list is kept on failure."""
        try:
            raw = self.api.get_notifications()
        except Exception as exc:
            logger.warning("Error fetching notifications: %s", exc)
            self.last_error = str(exc)
            return False

        items = raw if isinstance(raw, list) else []
        parsed: list[Notification] = []
        for item in items:
            try:
                parsed.append(Notification.from_api(item))
            except ValueError as exc:
                logger.debug("Skipping malformed notification: %s", exc)
        self.notifications = parsed
        self.last_error = None
        logger.info(
            "Loaded %d notifications (%d unread)",
            len(parsed),
            self.unread_count,
        )
        return True

    def mark_read(self, notification_id: int | str) -> bool:
        """Mark one notification read locally, then tell the server."""
        for n in self.notifications:
            if n.id == notification_id:
                n.read = True
        try:
            self.api.mark_notification_read(notification_id)
        except Exception as exc:
            logger.warning(
                "Error marking notification %s as read: %s",
                notification_id,
                exc,
            )
            self.last_error = str(exc)
            return False
        return True

    def load_settings(self) -> UserSettings | None:
        try:
            self.settings = UserSettings.from_api(self.api.get_settings())
        except Exception as exc:
            logger.warning("Error fetching user settings: %s", exc)
            self.last_error = str(exc)
            return None
        return self.settings

    def save_settings(self, settings: UserSettings) -> bool:
        try:
            self.api.update_settings(settings)
        except Exception as exc:
            logger.warning("Error updating user settings: %s", exc)
            self.last_error = str(exc)
            return False
        self.settings = settings
        return True
