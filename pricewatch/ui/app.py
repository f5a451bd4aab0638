# pricewatch/ui/app.py

"""Terminal dashboard for the pricewatch price tracker."""

import logging

from textual.app import App
from textual.binding import Binding
from textual.message import Message
from textual.screen import ModalScreen, Screen

from pricewatch.config.settings import Settings
from pricewatch.services.api_client import ApiClient
from pricewatch.services.auth import AuthState
from pricewatch.services.notifications import NotificationCenter
from pricewatch.services.price_history import PriceHistoryService
from pricewatch.services.product_store import ProductStore
from pricewatch.services.session import Session
from pricewatch.ui import routes
from pricewatch.ui.dashboard import DashboardScreen
from pricewatch.ui.screens import HomeScreen, LoginScreen, RegisterScreen

logger = logging.getLogger("pricewatch.ui")


class SessionExpired(Message):
    """Posted when the API rejected the token (possibly from a worker thread)."""

    def __init__(self, reason: str) -> None:
        super().__init__()
        self.reason = reason


class PriceWatchApp(App[object]):
    """Terminal dashboard for the pricewatch price tracker.

    Services are created here and shared by every screen; tests inject
    a session and a mocked API client.
    """

    CSS_PATH = "styles.tcss"
    TITLE = "PriceWatch"

    BINDINGS = [
        Binding("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        session: Session | None = None,
        api: ApiClient | None = None,
        offline_fallback: bool | None = None,
    ) -> None:
        super().__init__()
        self.settings = Settings()
        self.session = session or Session()
        self.api = api or ApiClient(self.session)
        self.offline_fallback = (
            Settings.OFFLINE_FALLBACK_ENABLED
            if offline_fallback is None
            else offline_fallback
        )
        self.auth = AuthState(self.api, self.session)
        self.history_service = PriceHistoryService(
            self.api, offline_fallback=self.offline_fallback
        )
        self.notification_center = NotificationCenter(self.api)
        self.current_route: str | None = None
        self.session.add_listener(self._on_token_expired)

    def create_store(self) -> ProductStore:
        """A fresh product list for a new dashboard visit."""
        return ProductStore(self.api, offline_fallback=self.offline_fallback)

    def on_mount(self) -> None:
        self.auth.initialize()
        self.navigate(
            routes.DASHBOARD if self.auth.is_authenticated else routes.HOME
        )

    def _build_screen(self, route: str) -> Screen[object]:
        if route == routes.DASHBOARD:
            return DashboardScreen(self.create_store())
        if route == routes.LOGIN:
            return LoginScreen()
        if route == routes.REGISTER:
            return RegisterScreen()
        return HomeScreen()

    def navigate(self, requested: str) -> str:
        """Show the screen for *requested*, applying the route guards.

        Returns the route actually shown.
        """
        route = routes.resolve_route(requested, self.auth.is_authenticated)
        if route != requested:
            logger.info("Route %s redirected to %s", requested, route)

        while isinstance(self.screen, ModalScreen):
            self.pop_screen()

        screen = self._build_screen(route)
        if len(self.screen_stack) > 1:
            self.switch_screen(screen)
        else:
            self.push_screen(screen)
        self.current_route = route
        return route

    def _on_token_expired(self, reason: str) -> None:
        self.post_message(SessionExpired(reason))

    def on_session_expired(self, message: SessionExpired) -> None:
        logger.warning("Redirecting to login: %s", message.reason)
        self.notify("Your session has expired, please sign in again", severity="warning")
        self.navigate(routes.LOGIN)

    def on_unmount(self) -> None:
        self.session.remove_listener(self._on_token_expired)
        self.api.close()
