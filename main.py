# main.py

"""Entry point for the pricewatch dashboard (TUI or headless CLI)."""

import argparse
import logging
import sys

from pricewatch.config.logging_config import setup_logging
from pricewatch.config.settings import Settings

logger = logging.getLogger("pricewatch.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    ranges = ", ".join(Settings.HISTORY_RANGES)

    parser = argparse.ArgumentParser(
        prog="pricewatch",
        description="Track product prices against your target price.",
        epilog=(
            f"API: {Settings.API_BASE_URL}. "
            "Run without a command to launch the interactive dashboard."
        ),
    )
    parser.add_argument(
        "--no-fallback",
        action="store_true",
        default=False,
        dest="no_fallback",
        help="Show errors instead of demo/local data when the API fails.",
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    login = sub.add_parser("login", help="Sign in and store the token.")
    login.add_argument("email")
    login.add_argument(
        "-p", "--password", default=None, help="Password (prompted if omitted)."
    )

    sub.add_parser("logout", help="Forget the stored token.")
    sub.add_parser("whoami", help="Show the signed-in user.")

    register = sub.add_parser("register", help="Create an account.")
    register.add_argument("full_name")
    register.add_argument("email")
    register.add_argument(
        "-p", "--password", default=None, help="Password (prompted if omitted)."
    )

    reset = sub.add_parser("reset-password", help="Request a password reset email.")
    reset.add_argument("email")

    for name, help_text in (
        ("list", "List tracked products."),
        ("stats", "Show dashboard statistics."),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument(
            "-f",
            "--format",
            choices=["json", "table"],
            default="table",
            dest="output_format",
            help="Output format (default: table).",
        )

    add = sub.add_parser("add", help="Track a new product.")
    add.add_argument("url")
    add.add_argument("name")
    add.add_argument("target_price")
    add.add_argument(
        "-c", "--current-price", default=None, dest="current_price",
        help="Current price (optional).",
    )

    edit = sub.add_parser("edit", help="Change a product's name or prices.")
    edit.add_argument("product_id")
    edit.add_argument("-n", "--name", default=None)
    edit.add_argument("-t", "--target-price", default=None, dest="target_price")
    edit.add_argument("-c", "--current-price", default=None, dest="current_price")

    remove = sub.add_parser("remove", help="Stop tracking a product.")
    remove.add_argument("product_id")

    history = sub.add_parser("history", help="Show a product's price history.")
    history.add_argument("product_id")
    history.add_argument(
        "-r", "--range", choices=list(Settings.HISTORY_RANGES),
        default=Settings.DEFAULT_HISTORY_RANGE, dest="range_key",
        help=f"History window ({ranges}).",
    )
    history.add_argument(
        "-f", "--format", choices=["json", "table"], default="table",
        dest="output_format",
    )

    chart = sub.add_parser("chart", help="Export a price chart as HTML.")
    chart.add_argument("product_id")
    chart.add_argument(
        "-r", "--range", choices=list(Settings.HISTORY_RANGES),
        default=Settings.DEFAULT_HISTORY_RANGE, dest="range_key",
    )
    chart.add_argument(
        "--no-open", action="store_false", dest="open_browser",
        help="Do not open the chart in a browser.",
    )

    export = sub.add_parser("export", help="Export tracked products to a file.")
    export.add_argument(
        "-f", "--format", choices=["csv", "json", "tsv"], default="csv",
        dest="export_format",
    )

    notifications = sub.add_parser("notifications", help="List price alerts.")
    notifications.add_argument(
        "--mark-read", default=None, dest="mark_read", metavar="ID",
        help="Mark a notification as read.",
    )

    sub.add_parser("health", help="Check connectivity to the API.")
    return parser


def _run_tui(offline_fallback: bool | None) -> None:
    """Launch the interactive Textual dashboard."""
    from pricewatch.ui.app import PriceWatchApp

    try:
        app = PriceWatchApp(offline_fallback=offline_fallback)
        app.run()
    except Exception:
        logger.critical("Fatal error during TUI run", exc_info=True)
        raise
    finally:
        logger.info("pricewatch TUI shutting down")


def _run_command(args: argparse.Namespace, offline_fallback: bool | None) -> int:
    """Dispatch a headless sub-command and return its exit code."""
    from pricewatch.cli import runner

    ctx = runner.CliContext(offline_fallback=offline_fallback)
    try:
        command = args.command
        if command == "login":
            return runner.run_login(ctx, args.email, args.password)
        if command == "logout":
            return runner.run_logout(ctx)
        if command == "whoami":
            return runner.run_whoami(ctx)
        if command == "register":
            return runner.run_register(ctx, args.full_name, args.email, args.password)
        if command == "reset-password":
            return runner.run_reset_password(ctx, args.email)
        if command == "list":
            return runner.run_list(ctx, args.output_format)
        if command == "stats":
            return runner.run_stats(ctx, args.output_format)
        if command == "add":
            return runner.run_add(
                ctx, args.url, args.name, args.target_price, args.current_price
            )
        if command == "edit":
            return runner.run_edit(
                ctx, args.product_id, args.name, args.target_price, args.current_price
            )
        if command == "remove":
            return runner.run_remove(ctx, args.product_id)
        if command == "history":
            return runner.run_history(
                ctx, args.product_id, args.range_key, args.output_format
            )
        if command == "chart":
            return runner.run_chart(
                ctx, args.product_id, args.range_key, args.open_browser
            )
        if command == "export":
            return runner.run_export(ctx, args.export_format)
        if command == "notifications":
            return runner.run_notifications(ctx, args.mark_read)
        if command == "health":
            return runner.run_health_check(ctx)
        raise SystemExit(f"Unknown command: {command}")
    finally:
        ctx.api.close()


def main() -> None:
    """Route to the TUI (no command) or a headless CLI command."""
    log_file = setup_logging()
    logger.info("pricewatch starting, log file: %s", log_file)

    parser = _build_parser()
    args = parser.parse_args()
    offline_fallback = False if args.no_fallback else None

    if args.command is None:
        _run_tui(offline_fallback)
    else:
        sys.exit(_run_command(args, offline_fallback))


if __name__ == "__main__":
    main()
