# pricewatch/services/auth.py

"""Authentication state holder for the dashboard."""

import enum
import logging
from dataclasses import dataclass
from typing import Any

from pricewatch.models.user import User
from pricewatch.services.api_client import ApiClient
from pricewatch.services.session import Session

logger = logging.getLogger("pricewatch.auth")


class AuthStatus(enum.Enum):
    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


@dataclass
class AuthResult:
    """Outcome of an auth operation; ``error`` is set instead of raising."""

    data: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class AuthState:
    """Tracks the current user on top of a :class:`Session`.

    None of the operations raise: failures come back as an
    :class:`AuthResult` with ``error`` set, for the caller to display.
    """

    def __init__(self, api: ApiClient, session: Session) -> None:
        self.api = api
        self.session = session
        self.status: AuthStatus = AuthStatus.LOADING
        self._user: User | None = None
        session.add_listener(self._on_session_expired)

    def initialize(self) -> AuthStatus:
        """Restore the cached user if a token is stored.

        The token is not re-validated against the server.
        """
        self.status = AuthStatus.LOADING
        try:
            if self.session.is_authenticated:
                self._user = self.session.user
                if self._user is None:
                    raise ValueError("token stored without a user")
        except Exception as exc:
            logger.error("Authentication check failed: %s", exc)
            self.session.clear()
            self._user = None
        self.status = (
            AuthStatus.AUTHENTICATED if self._user else AuthStatus.ANONYMOUS
        )
        logger.info("Auth initialised: %s", self.status.value)
        return self.status

    @property
    def user(self) -> User | None:
        """Current user; dropped as soon as the stored token disappears."""
        if self._user is not None and not self.session.is_authenticated:
            logger.info("Stored token gone, dropping in-memory user")
            self._user = None
            self.status = AuthStatus.ANONYMOUS
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def sign_in(self, email: str, password: str) -> AuthResult:
        self.status = AuthStatus.LOADING
        try:
            response = self.api.login(email, password)
            if not isinstance(response, dict) or not response.get("access_token"):
                raise ValueError("Login response did not include an access token")
            user = User.from_api(response.get("user") or {"email": email})
            self.session.store(str(response["access_token"]), user)
            self._user = user
            logger.info("Signed in as %s", user.email)
            return AuthResult(data=user)
        except Exception as exc:
            logger.warning("Sign-in failed for %s: %s", email, exc)
            return AuthResult(error=str(exc))
        finally:
            self.status = (
                AuthStatus.AUTHENTICATED if self._user else AuthStatus.ANONYMOUS
            )

    def sign_up(
        self,
        email: str,
        password: str,
        profile: dict[str, Any] | None = None,
    ) -> AuthResult:
        """Register an account. Does not sign the user in."""
        try:
            response = self.api.register(email, password, profile or {})
            logger.info("Registered account %s", email)
            return AuthResult(data=response)
        except Exception as exc:
            logger.warning("Sign-up failed for %s: %s", email, exc)
            return AuthResult(error=str(exc))

    def sign_out(self) -> AuthResult:
        """Forget the session locally; no network call is made."""
        try:
            self.session.clear()
        except Exception as exc:
            logger.error("Sign-out could not clear storage: %s", exc)
            return AuthResult(error=str(exc))
        finally:
            self._user = None
            self.status = AuthStatus.ANONYMOUS
        return AuthResult()

    def reset_password(self, email: str) -> AuthResult:
        try:
            return AuthResult(data=self.api.reset_password(email))
        except Exception as exc:
            logger.warning("Password reset failed for %s: %s", email, exc)
            return AuthResult(error=str(exc))

    def _on_session_expired(self, reason: str) -> None:
        self._user = None
        self.status = AuthStatus.ANONYMOUS
