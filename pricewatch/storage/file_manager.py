# pricewatch/storage/file_manager.py

"""Exports the tracked product list to disk."""

import csv
import json
import logging
from datetime import datetime
from pathlib import Path

from pricewatch.config.settings import Settings
from pricewatch.models.product import Product

logger = logging.getLogger("pricewatch.storage")


class FileManager:
    """Writes product lists as JSON or CSV into the exports directory."""

    def __init__(self, exports_dir: Path | None = None) -> None:
        self.exports_dir: Path = exports_dir or Settings.EXPORTS_DIR
        self.exports_dir.mkdir(parents=True, exist_ok=True)
        logger.debug("FileManager initialised, exports_dir=%s", self.exports_dir)

    def save_json(self, products: list[Product]) -> Path:
        """Save the product list to a timestamped JSON file."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = self.exports_dir / f"products_{timestamp}.json"

        data = [p.to_dict() for p in products]
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

        logger.info("Saved %d products to %s", len(products), filepath)
        return filepath

    def export_csv(self, products: list[Product]) -> Path:
        """Export products to a CSV file, targets reached first."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = self.exports_dir / f"export_products_{timestamp}.csv"

        with open(filepath, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(
                [
                    "Name",
                    "Current Price",
                    "Target Price",
                    "Status",
                    "Last Checked",
                    "URL",
                ]
            )
            for p in _sorted_for_export(products):
                writer.writerow(
                    [
                        p.name,
                        p.current_price,
                        p.target_price,
                        p.status_label,
                        p.last_checked.isoformat() if p.last_checked else "",
                        p.url,
                    ]
                )

        logger.info("Exported %d products to %s", len(products), filepath)
        return filepath

    def format_tsv(self, products: list[Product]) -> str:
        """Format products as tab-separated text (same order as CSV)."""
        lines: list[str] = ["Name\tCurrent\tTarget\tStatus\tURL"]
        for p in _sorted_for_export(products):
            lines.append(
                f"{p.name}\t{p.current_price}\t{p.target_price}"
                f"\t{p.status_label}\t{p.url}"
            )
        return "\n".join(lines)


def _sorted_for_export(products: list[Product]) -> list[Product]:
    """Reached targets first, then by distance to target."""
    return sorted(
        products,
        key=lambda p: (not p.target_reached, p.current_price - p.target_price),
    )
