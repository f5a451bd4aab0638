# tests/test_form_validator.py

"""Tests for the login, register and product form validators."""

import unittest

from pricewatch.filters.form_validator import (
    validate_login_form,
    validate_product_form,
    validate_register_form,
)
from pricewatch.models.product import Product


class TestLoginForm(unittest.TestCase):

    def test_valid(self) -> None:
        self.assertEqual(validate_login_form("a@b.co", "secret"), {})

    def test_missing_fields(self) -> None:
        errors = validate_login_form("", "")
        self.assertEqual(errors["email"], "Email is required")
        self.assertEqual(errors["password"], "Password is required")

    def test_invalid_email_and_short_password(self) -> None:
        errors = validate_login_form("not-an-email", "123")
        self.assertEqual(errors["email"], "Invalid email address")
        self.assertIn("at least 6", errors["password"])

    def test_email_case_insensitive(self) -> None:
        self.assertEqual(validate_login_form("ADA@Example.COM", "secret"), {})


class TestRegisterForm(unittest.TestCase):

    def test_valid(self) -> None:
        self.assertEqual(
            validate_register_form("Ada", "a@b.co", "secret", "secret", True), {}
        )

    def test_every_field_reported(self) -> None:
        errors = validate_register_form("A", "bad", "123", "456", False)
        self.assertEqual(
            set(errors),
            {"full_name", "email", "password", "confirm_password", "agree_terms"},
        )
        self.assertEqual(errors["confirm_password"], "Passwords do not match")

    def test_blank_name_and_missing_confirmation(self) -> None:
        errors = validate_register_form("  ", "a@b.co", "secret", "", True)
        self.assertEqual(errors["full_name"], "Name is required")
        self.assertEqual(errors["confirm_password"], "Please confirm your password")


class TestProductForm(unittest.TestCase):

    def test_valid_new_product(self) -> None:
        draft, errors = validate_product_form({
            "url": "https://shop.example.com/kettle",
            "name": "Kettle",
            "current_price": "45,50",
            "target_price": "40",
        })
        self.assertEqual(errors, {})
        self.assertEqual(draft.current_price, 45.5)
        self.assertEqual(draft.target_price, 40.0)
        self.assertIsNone(draft.id)

    def test_blank_current_price_defaults_to_zero(self) -> None:
        draft, errors = validate_product_form({
            "url": "https://x.com/a", "name": "Ab", "current_price": "",
            "target_price": 10,
        })
        self.assertEqual(errors, {})
        self.assertEqual(draft.current_price, 0.0)

    def test_invalid_fields(self) -> None:
        draft, errors = validate_product_form({
            "url": "shop.example.com",
            "name": "K",
            "current_price": "abc",
            "target_price": "0",
        })
        self.assertIsNone(draft)
        self.assertEqual(errors["url"], "Invalid URL")
        self.assertIn("at least 2", errors["name"])
        self.assertEqual(errors["current_price"], "Price must be a positive number")
        self.assertEqual(errors["target_price"], "Price must be greater than 0")

    def test_required_fields(self) -> None:
        draft, errors = validate_product_form({})
        self.assertIsNone(draft)
        self.assertEqual(errors["url"], "URL is required")
        self.assertEqual(errors["name"], "Name is required")
        self.assertEqual(errors["target_price"], "Target price is required")
        self.assertNotIn("current_price", errors)

    def test_non_finite_prices_rejected(self) -> None:
        for raw in ("nan", "inf", "-inf", float("nan"), float("inf")):
            with self.subTest(raw=raw):
                draft, errors = validate_product_form({
                    "url": "https://x.com/a", "name": "Ab",
                    "current_price": raw, "target_price": raw,
                })
                self.assertIsNone(draft)
                self.assertEqual(
                    errors["current_price"], "Price must be a positive number"
                )
                self.assertEqual(
                    errors["target_price"], "Price must be greater than 0"
                )

    def test_negative_current_price(self) -> None:
        _, errors = validate_product_form({
            "url": "https://x.com/a", "name": "Ab", "current_price": -1,
            "target_price": 10,
        })
        self.assertIn("current_price", errors)

    def test_editing_keeps_url_image_and_id(self) -> None:
        existing = Product(
            id=5, name="Old", url="https://x.com/old", target_price=10,
            image="https://img/old.png",
        )
        draft, errors = validate_product_form(
            {"url": "ignored", "name": "New name", "target_price": "8"},
            editing=existing,
        )
        self.assertEqual(errors, {})
        self.assertEqual(draft.url, "https://x.com/old")
        self.assertEqual(draft.image, "https://img/old.png")
        self.assertEqual(draft.id, 5)


if __name__ == "__main__":
    unittest.main()
