# pricewatch/services/stats.py

"""Aggregate statistics over the tracked product list."""

from pricewatch.config.settings import Settings
from pricewatch.models.product import Product
from pricewatch.models.stats import DashboardStats


def calculate_stats(products: list[Product]) -> DashboardStats:
    """Compute the dashboard counters for *products*.

    Savings are estimated against an original price of
    ``target_price * SAVINGS_MARKUP`` for every product whose target
    has been reached.
    """
    reached = [p for p in products if p.current_price <= p.target_price]
    monitoring = sum(1 for p in products if p.current_price > p.target_price)
    savings = sum(
        p.target_price * Settings.SAVINGS_MARKUP - p.current_price
        for p in reached
    )
    return DashboardStats(
        total_products=len(products),
        active_monitoring=monitoring,
        targets_reached=len(reached),
        total_savings=float(savings),
    )
