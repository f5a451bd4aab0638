# tests/test_file_manager.py

"""Tests for the FileManager export module."""

import csv
import json
import tempfile
import unittest
from datetime import datetime
from pathlib import Path
from typing import Any

from pricewatch.models.product import Product
from pricewatch.storage.file_manager import FileManager


class TestFileManager(unittest.TestCase):
    """Tests for JSON/CSV export and TSV formatting."""

    def setUp(self) -> None:
        """Set up a temp directory for exports."""
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.fm = FileManager(exports_dir=Path(self._tmp.name) / "exports")

    def _sample_products(self) -> list[Product]:
        """Return one monitored and one reached product."""
        return [
            Product(
                id=1,
                name="Product A",
                url="https://example.com/a",
                current_price=120.0,
                target_price=100.0,
            ),
            Product(
                id=2,
                name="Product B",
                url="https://example.com/b",
                current_price=45.0,
                target_price=50.0,
                last_checked=datetime(2026, 2, 14, 9, 30),
            ),
        ]

    def test_exports_dir_created(self) -> None:
        self.assertTrue(self.fm.exports_dir.is_dir())

    def test_save_json(self) -> None:
        """save_json writes every product in list order."""
        path = self.fm.save_json(self._sample_products())

        self.assertTrue(path.exists())
        self.assertRegex(path.name, r"^products_\d{8}_\d{6}\.json$")
        with open(path, encoding="utf-8") as f:
            data: list[dict[str, Any]] = json.load(f)
        self.assertEqual([d["name"] for d in data], ["Product A", "Product B"])
        self.assertEqual(data[1]["last_checked"], "2026-02-14T09:30:00")

    def test_save_json_empty_list(self) -> None:
        path = self.fm.save_json([])
        with open(path, encoding="utf-8") as f:
            self.assertEqual(json.load(f), [])

    def test_export_csv_reached_first(self) -> None:
        """export_csv writes a header and puts reached targets first."""
        path = self.fm.export_csv(self._sample_products())

        self.assertTrue(path.name.startswith("export_products_"))
        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        self.assertEqual(
            rows[0],
            ["Name", "Current Price", "Target Price", "Status", "Last Checked", "URL"],
        )
        self.assertEqual(rows[1][0], "Product B")
        self.assertEqual(rows[1][3], "Target reached")
        self.assertEqual(rows[2][3], "Monitoring")
        self.assertEqual(rows[2][4], "")

    def test_format_tsv(self) -> None:
        text = self.fm.format_tsv(self._sample_products())
        lines = text.split("\n")
        self.assertEqual(lines[0], "Name\tCurrent\tTarget\tStatus\tURL")
        self.assertEqual(len(lines), 3)
        self.assertTrue(lines[1].startswith("Product B\t45.0\t50.0"))


if __name__ == "__main__":
    unittest.main()
