# pricewatch/services/api_client.py

"""Thin REST client for the price-tracking API."""

import logging
from typing import Any

from curl_cffi import requests as curl_requests

from pricewatch.config.settings import Settings
from pricewatch.models.notification import UserSettings
from pricewatch.models.product import ProductDraft, ProductId
from pricewatch.services.session import Session

logger = logging.getLogger("pricewatch.api")


class ApiError(Exception):
    """A failed API call: HTTP error status or network failure."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.detail = message


class UnauthorizedError(ApiError):
    """The server rejected the bearer token (HTTP 401)."""


class ApiClient:
    """Issues one request per call against ``Settings.API_BASE_URL``.

    Every request carries the session's bearer token when present.
    A 401 response expires the session (clearing the stored token and
    notifying listeners) before :class:`UnauthorizedError` is raised;
    this applies to every endpoint, not just the ones callers check.
    """

    def __init__(
        self,
        session: Session,
        base_url: str | None = None,
        http: Any = None,
    ) -> None:
        self.session = session
        self.base_url = (base_url or Settings.API_BASE_URL).rstrip("/")
        self.http: Any = http or curl_requests.Session(
            impersonate=Settings.IMPERSONATE_BROWSER
        )
        self._timeout: int = Settings.REQUEST_TIMEOUT

    # ── Core request ────────────────────────────────────

    def request(
        self,
        method: str,
        endpoint: str,
        payload: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request and return the parsed body.

        Returns decoded JSON for JSON responses, the text body otherwise,
        and ``None`` for an empty body. Raises :class:`ApiError`.
        """
        url = f"{self.base_url}{endpoint}"
        headers: dict[str, str] = {
            **Settings.DEFAULT_HEADERS,
            **self.session.auth_headers(),
        }
        try:
            resp = self.http.request(
                method,
                url,
                headers=headers,
                json=payload,
                params=params,
                timeout=self._timeout,
            )
        except Exception as exc:
            logger.warning(
                "API request failed: %s %s: %s", method, endpoint, exc
            )
            raise ApiError(f"Network error: {exc}") from exc

        status: int = resp.status_code
        if status == 401:
            self.session.expire(f"{method} {endpoint} returned 401")
            raise UnauthorizedError(_error_detail(resp), status_code=401)
        if not 200 <= status < 300:
            detail = _error_detail(resp)
            logger.warning(
                "API request failed: %s %s -> HTTP %d (%s)",
                method,
                endpoint,
                status,
                detail,
            )
            raise ApiError(detail, status_code=status)

        logger.debug("%s %s -> HTTP %d", method, endpoint, status)
        text: str = resp.text or ""
        if not text.strip():
            return None
        content_type = str(resp.headers.get("content-type", ""))
        if "application/json" in content_type:
            try:
                return resp.json()
            except ValueError as exc:
                raise ApiError(f"Malformed JSON response: {exc}", status) from exc
        return text

    # ── Products ────────────────────────────────────────

    def get_products(self) -> Any:
        return self.request("GET", "/products/")

    def get_product(self, product_id: ProductId) -> Any:
        return self.request("GET", f"/products/{product_id}")

    def create_product(self, draft: ProductDraft) -> Any:
        return self.request("POST", "/products/", payload=draft.to_payload())

    def update_product(self, product_id: ProductId, draft: ProductDraft) -> Any:
        return self.request(
            "PUT", f"/products/{product_id}", payload=draft.to_payload()
        )

    def delete_product(self, product_id: ProductId) -> Any:
        return self.request("DELETE", f"/products/{product_id}")

    def get_price_history(self, product_id: ProductId) -> Any:
        return self.request("GET", f"/products/{product_id}/price-history")

    # ── Auth ────────────────────────────────────────────

    def login(self, email: str, password: str) -> Any:
        """``POST /auth/login`` → ``{access_token, user}``."""
        return self.request(
            "POST", "/auth/login", payload={"email": email, "password": password}
        )

    def register(
        self,
        email: str,
        password: str,
        profile: dict[str, Any] | None = None,
    ) -> Any:
        return self.request(
            "POST",
            "/auth/register",
            payload={**(profile or {}), "email": email, "password": password},
        )

    def reset_password(self, email: str) -> Any:
        return self.request(
            "POST", "/auth/reset-password", payload={"email": email}
        )

    # ── Notifications & settings ────────────────────────

    def get_notifications(self) -> Any:
        return self.request("GET", "/notifications/")

    def mark_notification_read(self, notification_id: int | str) -> Any:
        return self.request("PUT", f"/notifications/{notification_id}/read")

    def get_settings(self) -> Any:
        return self.request("GET", "/user/settings")

    def update_settings(self, settings: UserSettings) -> Any:
        return self.request(
            "PUT", "/user/settings", payload=settings.to_payload()
        )

    # ── Misc ────────────────────────────────────────────

    def health_check(self) -> Any:
        return self.request("GET", "/health")

    def close(self) -> None:
        try:
            self.http.close()
        except Exception:
            logger.debug("Ignoring error while closing HTTP session", exc_info=True)


def _error_detail(resp: Any) -> str:
    """Prefer the server's ``detail`` field over a generic status message."""
    try:
        body = resp.json()
    except Exception:
        body = None
    if isinstance(body, dict) and body.get("detail"):
        return str(body["detail"])
    return f"HTTP error! status: {resp.status_code}"
