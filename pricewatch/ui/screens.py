# pricewatch/ui/screens.py

"""Landing, authentication and modal form screens."""

import asyncio
import logging
from typing import TYPE_CHECKING, Any, cast

from rich.markup import escape
from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical
from textual.screen import ModalScreen, Screen
from textual.widgets import (
    Button,
    Checkbox,
    DataTable,
    Footer,
    Header,
    Input,
    Label,
    Static,
)

from pricewatch.filters.form_validator import (
    EMAIL_PATTERN,
    validate_login_form,
    validate_product_form,
    validate_register_form,
)
from pricewatch.models.product import Product, ProductDraft
from pricewatch.ui import routes

if TYPE_CHECKING:
    from pricewatch.ui.app import PriceWatchApp

logger = logging.getLogger("pricewatch.ui")


def format_errors(errors: dict[str, str]) -> str:
    """Render field errors as one red line per message."""
    return "\n".join(f"[red]• {escape(msg)}[/red]" for msg in errors.values())


class _AppScreen(Screen[Any]):
    """Screen with typed access to :class:`PriceWatchApp`."""

    @property
    def pw(self) -> "PriceWatchApp":
        return cast("PriceWatchApp", self.app)


class HomeScreen(_AppScreen):
    """Landing screen for signed-out users."""

    def compose(self) -> ComposeResult:
        yield Header()
        yield Container(
            Static("📉 PriceWatch", id="home_title", classes="form_title"),
            Static(
                "Track product prices and get notified when they drop "
                "below your target.",
                id="home_intro",
            ),
            Horizontal(
                Button("Sign in", variant="primary", id="home_login_btn"),
                Button("Create account", id="home_register_btn"),
                classes="form_buttons",
            ),
            id="home_container",
            classes="form_container",
        )
        yield Footer()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "home_login_btn":
            self.pw.navigate(routes.LOGIN)
        elif event.button.id == "home_register_btn":
            self.pw.navigate(routes.REGISTER)


class LoginScreen(_AppScreen):
    """Email/password sign-in form."""

    def compose(self) -> ComposeResult:
        yield Header()
        yield Container(
            Static("Sign in", classes="form_title"),
            Input(placeholder="Email", id="email_input"),
            Input(placeholder="Password", password=True, id="password_input"),
            Static("", id="login_errors", classes="form_errors"),
            Horizontal(
                Button("Sign in", variant="primary", id="login_btn"),
                Button("Create account", id="goto_register_btn"),
                Button("Forgot password", id="reset_btn"),
                classes="form_buttons",
            ),
            id="login_container",
            classes="form_container",
        )
        yield Footer()

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "login_btn":
            await self.perform_login()
        elif event.button.id == "goto_register_btn":
            self.pw.navigate(routes.REGISTER)
        elif event.button.id == "reset_btn":
            await self.perform_reset()

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "password_input":
            await self.perform_login()

    async def perform_login(self) -> None:
        email = self.query_one("#email_input", Input).value.strip()
        password = self.query_one("#password_input", Input).value
        errors_box = self.query_one("#login_errors", Static)

        errors = validate_login_form(email, password)
        errors_box.update(format_errors(errors))
        if errors:
            return

        result = await asyncio.to_thread(self.pw.auth.sign_in, email, password)
        if not result.ok:
            self.notify(result.error or "Sign-in failed", severity="error")
            return
        self.notify("Signed in successfully")
        self.pw.navigate(routes.DASHBOARD)

    async def perform_reset(self) -> None:
        email = self.query_one("#email_input", Input).value.strip()
        if not EMAIL_PATTERN.match(email):
            self.notify("Enter your email address first", severity="warning")
            return
        result = await asyncio.to_thread(self.pw.auth.reset_password, email)
        if result.ok:
            self.notify("Password reset email sent")
        else:
            self.notify(result.error or "Password reset failed", severity="error")


class RegisterScreen(_AppScreen):
    """Account registration form. Does not sign the user in."""

    def compose(self) -> ComposeResult:
        yield Header()
        yield Container(
            Static("Create account", classes="form_title"),
            Input(placeholder="Full name", id="name_input"),
            Input(placeholder="Email", id="reg_email_input"),
            Input(placeholder="Password", password=True, id="reg_password_input"),
            Input(
                placeholder="Confirm password",
                password=True,
                id="reg_confirm_input",
            ),
            Checkbox("I accept the terms of service", id="terms_checkbox"),
            Static("", id="register_errors", classes="form_errors"),
            Horizontal(
                Button("Create account", variant="primary", id="register_btn"),
                Button("Back to sign in", id="goto_login_btn"),
                classes="form_buttons",
            ),
            id="register_container",
            classes="form_container",
        )
        yield Footer()

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "register_btn":
            await self.perform_register()
        elif event.button.id == "goto_login_btn":
            self.pw.navigate(routes.LOGIN)

    async def perform_register(self) -> None:
        full_name = self.query_one("#name_input", Input).value.strip()
        email = self.query_one("#reg_email_input", Input).value.strip()
        password = self.query_one("#reg_password_input", Input).value
        confirm = self.query_one("#reg_confirm_input", Input).value
        agree = self.query_one("#terms_checkbox", Checkbox).value
        errors_box = self.query_one("#register_errors", Static)

        errors = validate_register_form(full_name, email, password, confirm, agree)
        errors_box.update(format_errors(errors))
        if errors:
            return

        result = await asyncio.to_thread(
            self.pw.auth.sign_up, email, password, {"full_name": full_name}
        )
        if not result.ok:
            self.notify(result.error or "Registration failed", severity="error")
            return
        self.notify("Account created, you can now sign in")
        self.pw.navigate(routes.LOGIN)


class ProductFormScreen(ModalScreen[ProductDraft | None]):
    """Add or edit a tracked product. Dismisses with the validated draft."""

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, product: Product | None = None) -> None:
        super().__init__()
        self.product = product

    def compose(self) -> ComposeResult:
        editing = self.product is not None
        p = self.product
        yield Vertical(
            Label(
                "Edit product" if editing else "Add product",
                classes="form_title",
            ),
            Input(
                value=p.url if p else "",
                placeholder="https://example.com/product",
                disabled=editing,
                id="url_input",
            ),
            Static(
                "The URL cannot be changed" if editing
                else "Paste the URL of the product to track",
                classes="hint",
            ),
            Input(value=p.name if p else "", placeholder="Product name", id="name_input"),
            Input(
                value=f"{p.current_price:.2f}" if p else "",
                placeholder="Current price (optional)",
                id="current_input",
            ),
            Input(
                value=f"{p.target_price:.2f}" if p else "",
                placeholder="Target price",
                id="target_input",
            ),
            Static("", id="form_errors", classes="form_errors"),
            Horizontal(
                Button("Cancel", id="cancel_btn"),
                Button(
                    "Save changes" if editing else "Add product",
                    variant="primary",
                    id="save_btn",
                ),
                classes="form_buttons",
            ),
            id="form_dialog",
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "save_btn":
            self.submit()
        elif event.button.id == "cancel_btn":
            self.dismiss(None)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.submit()

    def action_cancel(self) -> None:
        self.dismiss(None)

    def submit(self) -> None:
        fields = {
            "url": self.query_one("#url_input", Input).value,
            "name": self.query_one("#name_input", Input).value,
            "current_price": self.query_one("#current_input", Input).value,
            "target_price": self.query_one("#target_input", Input).value,
        }
        draft, errors = validate_product_form(fields, editing=self.product)
        self.query_one("#form_errors", Static).update(format_errors(errors))
        if draft is not None:
            self.dismiss(draft)


class NotificationsScreen(ModalScreen[None]):
    """Price alert list with read acknowledgement."""

    BINDINGS = [Binding("escape", "close", "Close")]

    @property
    def pw(self) -> "PriceWatchApp":
        return cast("PriceWatchApp", self.app)

    def compose(self) -> ComposeResult:
        yield Vertical(
            Label("Notifications", classes="form_title"),
            Static("Loading...", id="notifications_status"),
            cast(
                DataTable[str | Text],
                DataTable(
                    id="notifications_table",
                    cursor_type="row",
                    zebra_stripes=True,
                ),
            ),
            Horizontal(
                Button("Mark as read", id="mark_read_btn"),
                Button("Close", variant="primary", id="close_btn"),
                classes="form_buttons",
            ),
            id="notifications_dialog",
        )

    async def on_mount(self) -> None:
        table = cast(
            DataTable[str | Text],
            self.query_one("#notifications_table", DataTable),
        )
        table.add_columns("", "Message", "Received")
        ok = await asyncio.to_thread(self.pw.notification_center.refresh)
        if not ok:
            self.notify("Could not load notifications", severity="error")
        self.populate_table()

    def populate_table(self) -> None:
        center = self.pw.notification_center
        table = cast(
            DataTable[str | Text],
            self.query_one("#notifications_table", DataTable),
        )
        table.clear()
        for n in center.notifications:
            table.add_row(
                Text("●", style="bold blue") if not n.read else Text(""),
                n.message[:70],
                n.created_at.strftime("%Y-%m-%d %H:%M") if n.created_at else "",
            )
        status = self.query_one("#notifications_status", Static)
        if not center.notifications:
            status.update("No notifications")
        else:
            status.update(f"{center.unread_count} unread")

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "close_btn":
            self.dismiss(None)
        elif event.button.id == "mark_read_btn":
            await self.mark_selected_read()

    def action_close(self) -> None:
        self.dismiss(None)

    async def mark_selected_read(self) -> None:
        center = self.pw.notification_center
        table = self.query_one("#notifications_table", DataTable)
        row = table.cursor_row
        if not 0 <= row < len(center.notifications):
            return
        notification = center.notifications[row]
        ok = await asyncio.to_thread(center.mark_read, notification.id)
        if not ok:
            self.notify("Could not reach the server", severity="warning")
        self.populate_table()
