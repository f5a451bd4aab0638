# pricewatch/models/stats.py

"""Aggregate dashboard statistics."""

from dataclasses import dataclass


@dataclass
class DashboardStats:
    """Counts and savings derived from the current product list."""

    total_products: int = 0
    active_monitoring: int = 0
    targets_reached: int = 0
    total_savings: float = 0.0
