# pricewatch/filters/form_validator.py

"""Field-level validation for the login, register and product forms.

Each validator returns a ``field -> message`` dict; an empty dict means
the input is valid. Nothing here touches the network.
"""

import logging
import math
import re
from typing import Any

from pricewatch.config.settings import Settings
from pricewatch.models.product import URL_PATTERN, Product, ProductDraft

logger = logging.getLogger("pricewatch.filters")

EMAIL_PATTERN = re.compile(
    r"^[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}$", re.IGNORECASE
)
MIN_NAME_LENGTH = 2
MIN_PASSWORD_LENGTH = 6
MIN_TARGET_PRICE = 0.01


def _parse_number(raw: Any) -> float | None:
    """Parse a form number; blanks, junk, NaN and infinities give ``None``."""
    if raw is None:
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = str(raw).strip().replace(",", ".")
        if not text:
            return None
        try:
            value = float(text)
        except ValueError:
            return None
    return value if math.isfinite(value) else None


def _check_email(email: str, errors: dict[str, str]) -> None:
    if not email.strip():
        errors["email"] = "Email is required"
    elif not EMAIL_PATTERN.match(email.strip()):
        errors["email"] = "Invalid email address"


def _check_password(password: str, errors: dict[str, str]) -> None:
    if not password:
        errors["password"] = "Password is required"
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors["password"] = (
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )


def validate_login_form(email: str, password: str) -> dict[str, str]:
    errors: dict[str, str] = {}
    _check_email(email, errors)
    _check_password(password, errors)
    return errors


def validate_register_form(
    full_name: str,
    email: str,
    password: str,
    confirm_password: str,
    agree_terms: bool,
) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not full_name.strip():
        errors["full_name"] = "Name is required"
    elif len(full_name.strip()) < MIN_NAME_LENGTH:
        errors["full_name"] = (
            f"Name must be at least {MIN_NAME_LENGTH} characters"
        )
    _check_email(email, errors)
    _check_password(password, errors)
    if not confirm_password:
        errors["confirm_password"] = "Please confirm your password"
    elif confirm_password != password:
        errors["confirm_password"] = "Passwords do not match"
    if not agree_terms:
        errors["agree_terms"] = "You must accept the terms of service"
    return errors


def validate_product_form(
    fields: dict[str, Any],
    editing: Product | None = None,
) -> tuple[ProductDraft | None, dict[str, str]]:
    """Validate the add/edit product form.

    When *editing* is given the URL field is ignored and the existing
    product's URL and image are kept.

    Returns the draft (``None`` if invalid) and the field errors.
    """
    errors: dict[str, str] = {}

    if editing is not None:
        url = editing.url
    else:
        url = str(fields.get("url") or "").strip()
        if not url:
            errors["url"] = "URL is required"
        elif not URL_PATTERN.match(url):
            errors["url"] = "Invalid URL"

    name = str(fields.get("name") or "").strip()
    if not name:
        errors["name"] = "Name is required"
    elif len(name) < MIN_NAME_LENGTH:
        errors["name"] = f"Name must be at least {MIN_NAME_LENGTH} characters"

    raw_current = fields.get("current_price")
    current_price = _parse_number(raw_current)
    if current_price is None:
        if raw_current is not None and str(raw_current).strip():
            errors["current_price"] = "Price must be a positive number"
        current_price = 0.0
    elif current_price < 0:
        errors["current_price"] = "Price must be a positive number"

    raw_target = fields.get("target_price")
    target_price = _parse_number(raw_target)
    if target_price is None:
        if raw_target is not None and str(raw_target).strip():
            errors["target_price"] = "Price must be greater than 0"
        else:
            errors["target_price"] = "Target price is required"
    elif target_price < MIN_TARGET_PRICE:
        errors["target_price"] = "Price must be greater than 0"

    if errors or target_price is None:
        logger.debug("Product form rejected: %s", errors)
        return None, errors

    draft = ProductDraft(
        name=name,
        url=url,
        target_price=target_price,
        current_price=current_price,
        image=editing.image if editing is not None else Settings.PLACEHOLDER_IMAGE,
        id=editing.id if editing is not None else None,
    )
    return draft, errors
