# pricewatch/storage/chart_exporter.py

"""Interactive HTML price charts for a single tracked product.

Plotly is only imported when a chart is actually built, so the CLI and
the dashboard start without paying for it.
"""

import importlib
import logging
import webbrowser
from datetime import datetime
from pathlib import Path
from types import ModuleType
from typing import Any

from pricewatch.config.settings import Settings
from pricewatch.models.product import Product
from pricewatch.services.price_history import HistoryResult

logger = logging.getLogger("pricewatch.chart")

_CHARTS_DIR: Path = Settings.DATA_DIR / "charts"


def _get_plotly_go() -> ModuleType:
    return importlib.import_module("plotly.graph_objects")


def _chart_path(product: Product, range_key: str) -> Path:
    _CHARTS_DIR.mkdir(parents=True, exist_ok=True)
    slug = product.name[:30].replace(" ", "_").replace("/", "_")
    return _CHARTS_DIR / f"{slug}_{range_key}_{datetime.now():%Y%m%d_%H%M%S}.html"


def build_price_chart(product: Product, result: HistoryResult) -> Any:
    """Build a Plotly line chart with a dashed target-price line.

    Synthetic series say so in both the title and the trace name.
    """
    go = _get_plotly_go()
    dates = [p.date for p in result.points]
    prices = [p.price for p in result.points]
    currency = Settings.CURRENCY_SYMBOL
    tag = " (synthetic)" if result.synthetic else ""

    fig: Any = go.Figure()
    fig.add_trace(go.Scatter(
        x=dates,
        y=prices,
        mode="lines+markers",
        name=f"Price{tag}",
        hovertemplate=(
            "%{x|%Y-%m-%d}<br>"
            f"Price: {currency}%{{y:.2f}}"
            "<extra></extra>"
        ),
    ))
    fig.add_trace(go.Scatter(
        x=dates,
        y=[product.target_price] * len(dates),
        mode="lines",
        name="Target price",
        line={"dash": "dash", "color": "#ef4444"},
    ))

    fig.update_layout(
        title=f"{product.name[:60]}: price history{tag}",
        xaxis_title="Date",
        yaxis_title=f"Price ({currency})",
        hovermode="x unified",
        template="plotly_white",
    )
    return fig


def export_price_chart(
    product: Product,
    result: HistoryResult,
    open_browser: bool = True,
) -> Path | None:
    """Write the product's chart as HTML and optionally open it."""
    if len(result.points) < 2:
        logger.warning(
            "Not enough data points for chart: %s", product.name[:60]
        )
        return None

    fig = build_price_chart(product, result)

    filepath = _chart_path(product, result.range_key)
    fig.write_html(str(filepath), include_plotlyjs="cdn")
    logger.info("Price chart for product %s written to %s", product.id, filepath)

    if open_browser:
        webbrowser.open(filepath.as_uri())

    return filepath
