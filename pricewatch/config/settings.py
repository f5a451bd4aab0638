# pricewatch/config/settings.py

"""Central configuration for the pricewatch dashboard."""

import os
from pathlib import Path
from typing import Any

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: bool) -> bool:
    """Read a boolean flag such as ``1``/``true``/``yes`` from the environment."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    """Read an integer from the environment, ignoring junk values."""
    raw = os.getenv(name)
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


_BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
_DATA_DIR: Path = Path(
    os.getenv("PRICEWATCH_DATA_DIR", str(_BASE_DIR / "data"))
)


class Settings:
    """Central configuration for the pricewatch dashboard."""

    # --- API ---
    API_BASE_URL: str = os.getenv(
        "PRICEWATCH_API_URL", "http://localhost:8000"
    ).rstrip("/")
    REQUEST_TIMEOUT: int = _env_int("PRICEWATCH_REQUEST_TIMEOUT", 15)
    SLOW_RESPONSE_MS: float = 5000.0    # Health check "slow" threshold
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": "application/json",
        "Content-Type": "application/json",
    }

    # --- Offline behaviour ---
    # When enabled, failed API calls fall back to demo / locally
    # synthesised records instead of surfacing an error state.
    OFFLINE_FALLBACK_ENABLED: bool = _env_flag(
        "PRICEWATCH_OFFLINE_FALLBACK", True
    )

    # --- Local storage keys ---
    AUTH_TOKEN_KEY: str = "auth_token"
    USER_KEY: str = "user"

    # --- Price history ---
    HISTORY_RANGES: dict[str, int] = {"7d": 7, "30d": 30, "90d": 90}
    DEFAULT_HISTORY_RANGE: str = "7d"
    FALLBACK_START_FACTOR: float = 1.1
    FALLBACK_JITTER: tuple[float, float] = (0.98, 1.02)

    # --- Stats ---
    SAVINGS_MARKUP: float = 1.1         # Estimated original = target * 1.1

    # --- Display ---
    CURRENCY_SYMBOL: str = "€"
    PLACEHOLDER_IMAGE: str = (
        "https://images.unsplash.com/photo-1560472354-b33ff0c44a43"
        "?w=300&h=300&fit=crop"
    )

    # --- Demo dataset (used when the API is unreachable) ---
    DEMO_PRODUCTS: list[dict[str, Any]] = [
        {
            "id": 1,
            "name": "iPhone 15 Pro",
            "url": "https://example.com/iphone-15-pro",
            "current_price": 1199.99,
            "target_price": 1000.00,
            "image": (
                "https://images.unsplash.com/photo-1592750475338-74b7b21085ab"
                "?w=300&h=300&fit=crop"
            ),
        },
        {
            "id": 2,
            "name": "MacBook Air M3",
            "url": "https://example.com/macbook-air-m3",
            "current_price": 1399.99,
            "target_price": 1200.00,
            "image": (
                "https://images.unsplash.com/photo-1541807084-5c52b6b3adef"
                "?w=300&h=300&fit=crop"
            ),
        },
        {
            "id": 3,
            "name": "Sony WH-1000XM5",
            "url": "https://example.com/sony-headphones",
            "current_price": 299.99,
            "target_price": 250.00,
            "image": (
                "https://images.unsplash.com/photo-1583394838336-acd977736f90"
                "?w=300&h=300&fit=crop"
            ),
        },
    ]

    # --- Paths ---
    BASE_DIR: Path = _BASE_DIR
    DATA_DIR: Path = _DATA_DIR
    STORAGE_PATH: Path = _DATA_DIR / "local_storage.json"
    EXPORTS_DIR: Path = _DATA_DIR / "exports"
    LOGS_DIR: Path = BASE_DIR / "logs"
    LOG_KEEP_RUNS: int = _env_int("PRICEWATCH_LOG_KEEP_RUNS", 20)
