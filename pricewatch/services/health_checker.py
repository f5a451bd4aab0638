# pricewatch/services/health_checker.py

"""API connectivity health check."""

import logging
import time
from dataclasses import dataclass

from pricewatch.config.settings import Settings
from pricewatch.services.api_client import ApiClient, ApiError

logger = logging.getLogger("pricewatch.health")


@dataclass
class HealthResult:
    """Result of probing the API's health endpoint."""

    base_url: str
    status: str  # "ok", "slow", "down"
    latency_ms: float
    message: str


def probe_api(api: ApiClient) -> HealthResult:
    """Call ``GET /health`` once and classify the outcome."""
    start = time.monotonic()
    try:
        body = api.health_check()
    except ApiError as exc:
        elapsed_ms = (time.monotonic() - start) * 1000
        result = HealthResult(
            base_url=api.base_url,
            status="down",
            latency_ms=elapsed_ms,
            message=str(exc)[:80],
        )
    else:
        elapsed_ms = (time.monotonic() - start) * 1000
        slow = elapsed_ms > Settings.SLOW_RESPONSE_MS
        message = "High latency" if slow else ""
        if isinstance(body, dict) and body.get("status"):
            message = str(body["status"])
        result = HealthResult(
            base_url=api.base_url,
            status="slow" if slow else "ok",
            latency_ms=elapsed_ms,
            message=message,
        )

    logger.info(
        "Health check %s: %s (%.0fms) %s",
        result.base_url,
        result.status,
        result.latency_ms,
        result.message,
    )
    return result
