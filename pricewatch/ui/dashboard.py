# pricewatch/ui/dashboard.py

"""Dashboard screen: stats cards, product table and price panel."""

import asyncio
import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any, cast

from rich.markup import escape
from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical
from textual.screen import Screen
from textual.widgets import (
    Button,
    DataTable,
    Footer,
    Header,
    Select,
    Sparkline,
    Static,
)

from pricewatch.config.settings import Settings
from pricewatch.models.product import Product, ProductDraft
from pricewatch.services.price_history import (
    CancellationToken,
    HistoryResult,
    price_change,
)
from pricewatch.services.product_store import ProductStore, StoreResult
from pricewatch.storage.chart_exporter import export_price_chart
from pricewatch.storage.file_manager import FileManager
from pricewatch.ui import routes
from pricewatch.ui.screens import NotificationsScreen, ProductFormScreen

if TYPE_CHECKING:
    from pricewatch.ui.app import PriceWatchApp

logger = logging.getLogger("pricewatch.ui")


def format_price(price: float) -> str:
    return f"{Settings.CURRENCY_SYMBOL}{price:,.2f}"


def time_ago(moment: datetime | None) -> str:
    """Short relative time such as ``5 min ago``."""
    if moment is None:
        return "never"
    seconds = (datetime.now(moment.tzinfo) - moment).total_seconds()
    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{int(seconds // 60)} min ago"
    if seconds < 86400:
        return f"{int(seconds // 3600)} h ago"
    return f"{int(seconds // 86400)} d ago"


class DashboardScreen(Screen[Any]):
    """Tracked products, aggregate stats and the selected product's chart."""

    BINDINGS = [
        Binding("a", "add_product", "Add"),
        Binding("e", "edit_product", "Edit"),
        Binding("d", "delete_product", "Delete"),
        Binding("r", "refresh", "Refresh"),
        Binding("x", "export_csv", "Export CSV"),
        Binding("c", "export_chart", "Chart"),
        Binding("n", "notifications", "Alerts"),
        Binding("l", "logout", "Sign out"),
    ]

    def __init__(self, store: ProductStore) -> None:
        super().__init__()
        self.store = store
        self.range_key: str = Settings.DEFAULT_HISTORY_RANGE
        self.history: HistoryResult | None = None
        self._history_token: CancellationToken | None = None

    @property
    def pw(self) -> "PriceWatchApp":
        return cast("PriceWatchApp", self.app)

    def compose(self) -> ComposeResult:
        range_options = [
            (f"{days} days", key) for key, days in Settings.HISTORY_RANGES.items()
        ]
        yield Header()
        yield Container(
            Static("", id="welcome"),
            Static("", id="data_banner"),
            Horizontal(
                Static("", id="stat_total", classes="stat_card"),
                Static("", id="stat_monitoring", classes="stat_card"),
                Static("", id="stat_reached", classes="stat_card"),
                Static("", id="stat_savings", classes="stat_card"),
                id="stats_cards",
            ),
            Horizontal(
                Button("Add product", variant="primary", id="add_btn"),
                Button("Notifications", id="notifications_btn"),
                Button("Sign out", id="logout_btn"),
                id="actions",
            ),
            Horizontal(
                cast(
                    DataTable[str | Text],
                    DataTable(
                        id="products_table",
                        zebra_stripes=True,
                        cursor_type="row",
                    ),
                ),
                Vertical(
                    Static("Price chart", id="chart_title"),
                    Select(
                        range_options,
                        value=self.range_key,
                        allow_blank=False,
                        id="range_select",
                    ),
                    Sparkline([], id="price_sparkline"),
                    Static(
                        "Select a product to see its price history",
                        id="chart_summary",
                    ),
                    id="chart_panel",
                ),
                id="main_panel",
            ),
            id="dashboard",
        )
        yield Footer()

    def on_mount(self) -> None:
        table = cast(
            DataTable[str | Text],
            self.query_one("#products_table", DataTable),
        )
        table.add_columns("Product", "Current", "Target", "Status", "Checked")
        user = self.pw.auth.user
        name = user.display_name if user else "User"
        self.query_one("#welcome", Static).update(
            f"[b]Hello, {escape(name)}! 👋[/b]  Here is a summary of your tracked products"
        )
        self.refresh_view()
        self.load_products()

    # ── Rendering ───────────────────────────────────────

    def refresh_view(self) -> None:
        """Redraw the stats cards, banner and product table."""
        self._update_stats()
        banner = self.query_one("#data_banner", Static)
        if self.store.using_demo_data:
            banner.update("[yellow]⚠ Offline: showing demo products[/yellow]")
        else:
            banner.update("")
        self.populate_table()
        if self.store.selected is None:
            self._clear_chart()

    def _update_stats(self) -> None:
        stats = self.store.stats()
        self.query_one("#stat_total", Static).update(
            f"Tracked products\n[b]{stats.total_products}[/b]"
        )
        self.query_one("#stat_monitoring", Static).update(
            f"Active monitoring\n[b]{stats.active_monitoring}[/b]"
        )
        self.query_one("#stat_reached", Static).update(
            f"Targets reached\n[b]{stats.targets_reached}[/b]"
        )
        self.query_one("#stat_savings", Static).update(
            f"Total savings\n[b]{format_price(stats.total_savings)}[/b]"
        )

    def populate_table(self) -> None:
        table = cast(
            DataTable[str | Text],
            self.query_one("#products_table", DataTable),
        )
        table.clear()
        for p in self.store.products:
            status_style = "bold green" if p.target_reached else "blue"
            table.add_row(
                p.name[:40],
                Text(
                    format_price(p.current_price),
                    style="green" if p.target_reached else "red",
                ),
                format_price(p.target_price),
                Text(p.status_label, style=status_style),
                time_ago(p.last_checked),
                key=str(p.id),
            )

    def _clear_chart(self) -> None:
        self.history = None
        self.query_one("#chart_title", Static).update("Price chart")
        self.query_one("#price_sparkline", Sparkline).data = []
        self.query_one("#chart_summary", Static).update(
            "Select a product to see its price history"
        )

    def render_history(self, product: Product, result: HistoryResult) -> None:
        self.history = result
        self.query_one("#chart_title", Static).update(
            f"[b]{escape(product.name)}[/b]"
        )
        self.query_one("#price_sparkline", Sparkline).data = [
            p.price for p in result.points
        ]
        lines: list[str] = []
        if result.points:
            _change, percent = price_change(result.points)
            arrow = "▼" if percent < 0 else "▲"
            colour = "green" if percent < 0 else "red"
            lines.append(
                f"{format_price(product.current_price)}  "
                f"[{colour}]{arrow} {percent:+.1f}%[/{colour}]  "
                f"target {format_price(product.target_price)}"
            )
        if result.synthetic:
            lines.append("[dim italic]Synthetic data: no real history yet[/dim italic]")
        if result.error:
            lines.append(
                f"[red]History unavailable: {escape(result.error[:80])}[/red]"
            )
        self.query_one("#chart_summary", Static).update("\n".join(lines))

    # ── Loading ─────────────────────────────────────────

    def load_products(self) -> None:
        self.run_worker(self._load_products(), exclusive=True, group="products")

    async def _load_products(self) -> None:
        result = await asyncio.to_thread(self.store.load)
        self.refresh_view()
        if result.source == "fallback":
            self.notify(result.message, severity="warning")
        elif not result.ok:
            self.notify(
                f"Error loading products: {result.error}", severity="error"
            )

    def show_history(self, product: Product) -> None:
        """Load *product*'s chart, superseding any in-flight load."""
        if self._history_token is not None:
            self._history_token.cancel()
        token = CancellationToken()
        self._history_token = token
        self.query_one("#chart_summary", Static).update("Loading price history...")
        self.run_worker(
            self._load_history(product, self.range_key, token),
            exclusive=True,
            group="history",
        )

    async def _load_history(
        self,
        product: Product,
        range_key: str,
        token: CancellationToken,
    ) -> None:
        result = await asyncio.to_thread(
            self.pw.history_service.load, product, range_key, token
        )
        if result.cancelled or token.cancelled:
            return
        if self.store.selected is None or self.store.selected.id != product.id:
            return
        self.render_history(product, result)

    # ── Events ──────────────────────────────────────────

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        if event.data_table.id != "products_table":
            return
        product = self._product_at(event.cursor_row)
        if product is None:
            return
        self.store.select(product.id)
        self.show_history(product)

    def on_select_changed(self, event: Select.Changed) -> None:
        if event.select.id != "range_select" or not isinstance(event.value, str):
            return
        if event.value == self.range_key:
            return
        self.range_key = event.value
        if self.store.selected is not None:
            self.show_history(self.store.selected)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "add_btn":
            self.action_add_product()
        elif event.button.id == "notifications_btn":
            self.action_notifications()
        elif event.button.id == "logout_btn":
            self.action_logout()

    # ── Actions ─────────────────────────────────────────

    def _ensure_session(self) -> bool:
        """Bounce to the login screen if the stored token vanished."""
        if self.pw.auth.is_authenticated:
            return True
        self.notify("Your session has ended, please sign in", severity="warning")
        self.pw.navigate(routes.DASHBOARD)
        return False

    def _product_at(self, row: int) -> Product | None:
        if 0 <= row < len(self.store.products):
            return self.store.products[row]
        return None

    def _cursor_product(self) -> Product | None:
        table = self.query_one("#products_table", DataTable)
        if table.row_count == 0:
            return None
        return self._product_at(table.cursor_row)

    def action_refresh(self) -> None:
        if self._ensure_session():
            self.load_products()

    def action_add_product(self) -> None:
        if self._ensure_session():
            self.app.push_screen(ProductFormScreen(), self._on_add_submitted)

    def _on_add_submitted(self, draft: ProductDraft | None) -> None:
        if draft is not None:
            self.run_worker(self._apply(self.store.add, draft), group="mutations")

    def action_edit_product(self) -> None:
        if not self._ensure_session():
            return
        product = self._cursor_product()
        if product is None:
            self.notify("No product selected", severity="warning")
            return
        self.app.push_screen(ProductFormScreen(product), self._on_edit_submitted)

    def _on_edit_submitted(self, draft: ProductDraft | None) -> None:
        if draft is not None:
            self.run_worker(self._apply(self.store.update, draft), group="mutations")

    def action_delete_product(self) -> None:
        if not self._ensure_session():
            return
        product = self._cursor_product()
        if product is None:
            self.notify("No product selected", severity="warning")
            return
        self.run_worker(self._apply(self.store.remove, product.id), group="mutations")

    async def _apply(self, operation: Any, argument: Any) -> StoreResult:
        result: StoreResult = await asyncio.to_thread(operation, argument)
        self.refresh_view()
        if not result.ok:
            self.notify(f"{result.message}: {result.error}", severity="error")
        elif result.source == "fallback":
            self.notify(f"{result.message} (saved locally)", severity="warning")
        else:
            self.notify(result.message)
        selected = self.store.selected
        if selected is not None and result.product is not None:
            if selected.id == result.product.id:
                self.show_history(selected)
        return result

    def action_export_csv(self) -> None:
        if not self.store.products:
            self.notify("No products to export", severity="warning")
            return
        try:
            path = FileManager().export_csv(self.store.products)
            self.notify(f"Exported to {path}")
        except Exception as e:
            logger.error("Failed to export products", exc_info=True)
            self.notify(f"Export failed: {e}", severity="error")

    def action_export_chart(self) -> None:
        product = self.store.selected
        if product is None or self.history is None:
            self.notify("Select a product first", severity="warning")
            return
        try:
            path = export_price_chart(product, self.history)
        except Exception as e:
            logger.error("Failed to export chart", exc_info=True)
            self.notify(f"Chart export failed: {e}", severity="error")
            return
        if path is None:
            self.notify("Not enough data for a chart", severity="warning")
        else:
            self.notify(f"Chart saved to {path}")

    def action_notifications(self) -> None:
        if self._ensure_session():
            self.app.push_screen(NotificationsScreen())

    def action_logout(self) -> None:
        self.pw.auth.sign_out()
        self.notify("Signed out")
        self.pw.navigate(routes.LOGIN)
