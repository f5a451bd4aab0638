# tests/conftest.py

"""Shared pytest fixtures for all pricewatch tests."""

from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest

from pricewatch.config.settings import Settings


@pytest.fixture(autouse=True)
def isolated_paths(tmp_path: Path) -> Generator[Path, None, None]:
    """Point storage, exports and logs at a per-test temp directory."""
    data_dir = tmp_path / "data"
    with patch.multiple(
        Settings,
        DATA_DIR=data_dir,
        STORAGE_PATH=data_dir / "local_storage.json",
        EXPORTS_DIR=data_dir / "exports",
        LOGS_DIR=tmp_path / "logs",
    ):
        yield tmp_path


@pytest.fixture(autouse=True)
def no_browser() -> Generator[None, None, None]:
    """Never open a real browser from chart exports."""
    with patch("webbrowser.open"):
        yield
