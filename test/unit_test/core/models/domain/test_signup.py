"""Unit tests for signup data validation."""

import pytest

from emotions_app.core.models.domain.signup import (
    is_disposable_email,
    is_valid_email,
    normalize_email,
    validate_signup,
)


def test_normalize_email():
    assert normalize_email("  Jane.Doe@Example.COM ") == "jane.doe@example.com"


@pytest.mark.parametrize("email", ["jane@example.com", "a.b+c@sub.example.org"])
def test_valid_emails(email):
    assert is_valid_email(email)


@pytest.mark.parametrize("email", ["", "jane", "jane@", "jane@example", "ja ne@example.com"])
def test_invalid_emails(email):
    assert not is_valid_email(email)


def test_disposable_domains():
    assert is_disposable_email("someone@Mailinator.com")
    assert not is_disposable_email("someone@example.com")


def test_valid_signup_has_no_errors():
    assert validate_signup("jane@example.com", "Jane", "Doe", "Kenya", "patient") == []


def test_collects_every_problem():
    errors = validate_signup("not-an-email", "", None, " ", None)
    assert errors == [
        "Invalid email format",
        "First name is required",
        "Last name is required",
        "Country is required",
        "Role is required",
    ]


def test_disposable_email_error():
    errors = validate_signup("x@yopmail.com", "Jane", "Doe", "Kenya", "patient")
    assert errors == ["Disposable email addresses are not allowed"]
