# pricewatch/cli/runner.py

"""Headless CLI commands built on the same services as the TUI."""

import json
import logging
import sys
from collections.abc import Callable
from typing import Any

from rich.console import Console
from rich.prompt import Prompt
from rich.table import Table

from pricewatch.config.settings import Settings
from pricewatch.filters.form_validator import (
    validate_login_form,
    validate_product_form,
    validate_register_form,
)
from pricewatch.models.product import Product, ProductId
from pricewatch.services.api_client import ApiClient
from pricewatch.services.auth import AuthState
from pricewatch.services.health_checker import probe_api
from pricewatch.services.notifications import NotificationCenter
from pricewatch.services.price_history import PriceHistoryService, price_change
from pricewatch.services.product_store import ProductStore, StoreResult
from pricewatch.services.session import Session
from pricewatch.ui import routes

logger = logging.getLogger("pricewatch.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


class CliContext:
    """Services shared by one CLI invocation."""

    def __init__(
        self,
        session: Session | None = None,
        api: ApiClient | None = None,
        offline_fallback: bool | None = None,
    ) -> None:
        self.session = session or Session()
        self.api = api or ApiClient(self.session)
        self.auth = AuthState(self.api, self.session)
        self.auth.initialize()
        self.store = ProductStore(self.api, offline_fallback=offline_fallback)
        self.history = PriceHistoryService(self.api, offline_fallback=offline_fallback)
        self.notifications = NotificationCenter(self.api)

    def require_login(self) -> bool:
        """Same guard as the dashboard route; prints a hint when signed out."""
        route = routes.resolve_route(routes.DASHBOARD, self.auth.is_authenticated)
        if route == routes.LOGIN:
            _err.print("[red]Not signed in. Run `pricewatch login` first.[/red]")
            return False
        return True


def coerce_id(raw: str) -> ProductId:
    """CLI ids arrive as text; numeric ids are sent as integers."""
    return int(raw) if raw.strip().isdigit() else raw.strip()


def _print_errors(errors: dict[str, str]) -> None:
    for field_name, message in errors.items():
        _err.print(f"[red]{field_name}: {message}[/red]")


def _report(result: StoreResult) -> int:
    if not result.ok:
        _err.print(f"[red]{result.message}: {result.error}[/red]")
        return 1
    if result.source == "fallback":
        _err.print(
            f"[yellow]{result.message} locally (API unavailable: {result.error})[/yellow]"
        )
    elif result.error:
        _err.print(f"[yellow]{result.message} (API error: {result.error})[/yellow]")
    else:
        _err.print(f"[green]✓ {result.message}[/green]")
    return 0


def _products_to_dicts(products: list[Product]) -> list[dict[str, Any]]:
    return [{**p.to_dict(), "status": p.status_label} for p in products]


def _print_products(products: list[Product]) -> None:
    """Render a Rich table of products to stdout."""
    table = Table(
        title="Tracked Products",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("ID", style="dim")
    table.add_column("Product", max_width=40)
    table.add_column("Current", justify="right")
    table.add_column("Target", justify="right")
    table.add_column("Status", justify="center")
    table.add_column("URL", overflow="fold", style="dim")

    symbol = Settings.CURRENCY_SYMBOL
    for p in products:
        reached = p.target_reached
        table.add_row(
            str(p.id),
            p.name[:40],
            f"[{'green' if reached else 'red'}]{symbol}{p.current_price:,.2f}[/]",
            f"{symbol}{p.target_price:,.2f}",
            "[bold green]Target reached[/]" if reached else "[blue]Monitoring[/]",
            p.url,
        )

    Console().print(table)


def _emit(data: Any, output_format: str, render: Callable[[], None]) -> None:
    if output_format == "json":
        json.dump(data, sys.stdout, ensure_ascii=False, indent=2, default=str)
        sys.stdout.write("\n")
    else:
        render()


# ── Auth commands ───────────────────────────────────────


def run_login(ctx: CliContext, email: str, password: str | None) -> int:
    if password is None:
        password = Prompt.ask("Password", password=True, console=_err)
    errors = validate_login_form(email, password)
    if errors:
        _print_errors(errors)
        return 1
    result = ctx.auth.sign_in(email, password)
    if not result.ok:
        _err.print(f"[red]Sign-in failed: {result.error}[/red]")
        return 1
    _err.print(f"[green]✓ Signed in as {result.data.display_name}[/green]")
    return 0


def run_logout(ctx: CliContext) -> int:
    ctx.auth.sign_out()
    _err.print("[green]✓ Signed out[/green]")
    return 0


def run_register(
    ctx: CliContext,
    full_name: str,
    email: str,
    password: str | None,
) -> int:
    if password is None:
        password = Prompt.ask("Password", password=True, console=_err)
        confirm = Prompt.ask("Confirm password", password=True, console=_err)
    else:
        confirm = password
    errors = validate_register_form(full_name, email, password, confirm, True)
    if errors:
        _print_errors(errors)
        return 1
    result = ctx.auth.sign_up(email, password, {"full_name": full_name})
    if not result.ok:
        _err.print(f"[red]Registration failed: {result.error}[/red]")
        return 1
    _err.print("[green]✓ Account created, run `pricewatch login` to sign in[/green]")
    return 0


def run_reset_password(ctx: CliContext, email: str) -> int:
    result = ctx.auth.reset_password(email)
    if not result.ok:
        _err.print(f"[red]Password reset failed: {result.error}[/red]")
        return 1
    _err.print("[green]✓ Password reset email sent[/green]")
    return 0


def run_whoami(ctx: CliContext) -> int:
    user = ctx.auth.user
    if user is None:
        _err.print("[yellow]Not signed in[/yellow]")
        return 1
    Console().print(f"{user.display_name} <{user.email}>")
    return 0


# ── Product commands ────────────────────────────────────


def run_list(ctx: CliContext, output_format: str) -> int:
    if not ctx.require_login():
        return 1
    result = ctx.store.load()
    if not result.ok:
        return _report(result)
    if result.source == "fallback":
        _err.print(f"[yellow]{result.message}[/yellow]")
    _emit(
        _products_to_dicts(ctx.store.products),
        output_format,
        lambda: _print_products(ctx.store.products),
    )
    return 0


def run_add(
    ctx: CliContext,
    url: str,
    name: str,
    target_price: str,
    current_price: str | None,
) -> int:
    if not ctx.require_login():
        return 1
    draft, errors = validate_product_form(
        {
            "url": url,
            "name": name,
            "target_price": target_price,
            "current_price": current_price,
        }
    )
    if draft is None:
        _print_errors(errors)
        return 1
    result = ctx.store.add(draft)
    if result.product is not None:
        _print_products([result.product])
    return _report(result)


def run_edit(
    ctx: CliContext,
    product_id: str,
    name: str | None,
    target_price: str | None,
    current_price: str | None,
) -> int:
    if not ctx.require_login():
        return 1
    ctx.store.load()
    existing = ctx.store.get(coerce_id(product_id))
    if existing is None:
        _err.print(f"[red]No product with id {product_id}[/red]")
        return 1
    draft, errors = validate_product_form(
        {
            "name": name if name is not None else existing.name,
            "target_price": (
                target_price if target_price is not None else existing.target_price
            ),
            "current_price": (
                current_price if current_price is not None else existing.current_price
            ),
        },
        editing=existing,
    )
    if draft is None:
        _print_errors(errors)
        return 1
    return _report(ctx.store.update(draft))


def run_remove(ctx: CliContext, product_id: str) -> int:
    if not ctx.require_login():
        return 1
    ctx.store.load()
    pid = coerce_id(product_id)
    if ctx.store.get(pid) is None:
        _err.print(f"[red]No product with id {product_id}[/red]")
        return 1
    return _report(ctx.store.remove(pid))


def run_stats(ctx: CliContext, output_format: str) -> int:
    if not ctx.require_login():
        return 1
    ctx.store.load()
    stats = ctx.store.stats()

    def render() -> None:
        table = Table(title="Dashboard Stats", title_style="bold cyan")
        table.add_column("Metric", style="bold")
        table.add_column("Value", justify="right")
        table.add_row("Tracked products", str(stats.total_products))
        table.add_row("Active monitoring", str(stats.active_monitoring))
        table.add_row("Targets reached", str(stats.targets_reached))
        table.add_row(
            "Total savings",
            f"{Settings.CURRENCY_SYMBOL}{stats.total_savings:,.2f}",
        )
        Console().print(table)

    _emit(
        {
            "total_products": stats.total_products,
            "active_monitoring": stats.active_monitoring,
            "targets_reached": stats.targets_reached,
            "total_savings": round(stats.total_savings, 2),
        },
        output_format,
        render,
    )
    return 0


def _load_product(ctx: CliContext, product_id: str) -> Product | None:
    ctx.store.load()
    product = ctx.store.select(coerce_id(product_id))
    if product is None:
        _err.print(f"[red]No product with id {product_id}[/red]")
    return product


def run_history(
    ctx: CliContext,
    product_id: str,
    range_key: str,
    output_format: str,
) -> int:
    if not ctx.require_login():
        return 1
    product = _load_product(ctx, product_id)
    if product is None:
        return 1
    result = ctx.history.load(product, range_key)
    if result.error:
        _err.print(f"[yellow]History unavailable: {result.error}[/yellow]")
    if not result.points:
        return 1
    if result.synthetic:
        _err.print("[dim]Synthetic data: no real price history yet[/dim]")

    def render() -> None:
        _change, percent = price_change(result.points)
        table = Table(
            title=f"{product.name} ({result.range_key}, {percent:+.1f}%)",
            title_style="bold cyan",
        )
        table.add_column("Date")
        table.add_column("Price", justify="right", style="green")
        for point in result.points:
            table.add_row(
                point.date.isoformat(),
                f"{Settings.CURRENCY_SYMBOL}{point.price:,.2f}",
            )
        Console().print(table)

    _emit(
        {
            "product_id": product.id,
            "range": result.range_key,
            "synthetic": result.synthetic,
            "points": [
                {"date": p.date.isoformat(), "price": p.price}
                for p in result.points
            ],
        },
        output_format,
        render,
    )
    return 0


def run_chart(
    ctx: CliContext,
    product_id: str,
    range_key: str,
    open_browser: bool,
) -> int:
    from pricewatch.storage.chart_exporter import export_price_chart

    if not ctx.require_login():
        return 1
    product = _load_product(ctx, product_id)
    if product is None:
        return 1
    result = ctx.history.load(product, range_key)
    path = export_price_chart(product, result, open_browser=open_browser)
    if path is None:
        _err.print("[yellow]Not enough data points for a chart[/yellow]")
        return 1
    _err.print(f"[green]✓ Chart saved → {path}[/green]")
    return 0


def run_export(ctx: CliContext, export_format: str) -> int:
    """Write products to CSV/JSON in the exports dir, or print TSV to stdout."""
    from pricewatch.storage.file_manager import FileManager

    if not ctx.require_login():
        return 1
    ctx.store.load()
    try:
        fm = FileManager()
        if export_format == "tsv":
            sys.stdout.write(fm.format_tsv(ctx.store.products) + "\n")
            return 0
        if export_format == "csv":
            path = fm.export_csv(ctx.store.products)
        else:
            path = fm.save_json(ctx.store.products)
    except Exception as exc:
        logger.error("Export failed: %s", exc, exc_info=True)
        _err.print(f"[red]Export failed: {exc}[/red]")
        return 1
    _err.print(f"[green]✓ Exported {len(ctx.store.products)} products → {path}[/green]")
    return 0


# ── Notifications & health ──────────────────────────────


def run_notifications(ctx: CliContext, mark_read: str | None) -> int:
    if not ctx.require_login():
        return 1
    center = ctx.notifications
    if not center.refresh():
        _err.print(f"[red]Could not load notifications: {center.last_error}[/red]")
        return 1
    if mark_read is not None:
        if not center.mark_read(coerce_id(mark_read)):
            _err.print(f"[red]Could not mark as read: {center.last_error}[/red]")
            return 1
        _err.print(f"[green]✓ Notification {mark_read} marked as read[/green]")
        return 0

    table = Table(
        title=f"Notifications ({center.unread_count} unread)",
        title_style="bold cyan",
    )
    table.add_column("ID", style="dim")
    table.add_column("", width=2)
    table.add_column("Message")
    table.add_column("Received", style="dim")
    for n in center.notifications:
        table.add_row(
            str(n.id),
            "[bold blue]●[/]" if not n.read else "",
            n.message,
            n.created_at.strftime("%Y-%m-%d %H:%M") if n.created_at else "—",
        )
    Console().print(table)
    return 0


def run_health_check(ctx: CliContext) -> int:
    """Probe the API health endpoint."""
    _err.print(f"[bold]Checking API at {ctx.api.base_url}...[/bold]")
    r = probe_api(ctx.api)

    table = Table(
        title="API Health Check",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("API", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Latency", justify="right")
    table.add_column("Notes", style="dim")

    if r.status == "ok":
        status = "[green]✅ OK[/green]"
    elif r.status == "slow":
        status = "[yellow]⚠️  SLOW[/yellow]"
    else:
        status = "[red]❌ DOWN[/red]"

    latency = f"{r.latency_ms:.0f}ms" if r.latency_ms > 0 else "—"
    table.add_row(r.base_url, status, latency, r.message)

    Console().print(table)
    return 1 if r.status == "down" else 0
