"""
Unit Tests for input validation
"""
import pytest

from fastfinder.core.validation import (
    INVALID_CONTACT_MESSAGE,
    INVALID_EMAIL_MESSAGE,
    PASSWORD_COMPOSITION_MESSAGE,
    PASSWORD_LENGTH_MESSAGE,
    normalize_email,
    validate_contact_number,
    validate_email,
    validate_password,
)


class TestEmailValidation:

    @pytest.mark.parametrize("email", ["alice@x.com", "a.b+c@campus.edu.pk", "  bob@uni.org  "])
    def test_valid(self, email):
        assert validate_email(email) == (True, None)

    @pytest.mark.parametrize("email", ["", None, "alice", "alice@x", "alice@@x.com", "al ice@x.com", "@x.com"])
    def test_invalid(self, email):
        assert validate_email(email) == (False, INVALID_EMAIL_MESSAGE)

    def test_normalize(self):
        assert normalize_email("  Alice@X.COM ") == "alice@x.com"
        assert normalize_email(None) == ""


class TestPasswordValidation:

    def test_valid(self):
        assert validate_password("Passw0rd") == (True, None)

    @pytest.mark.parametrize("password", ["", None, "Ab1", "Abcdef1"])
    def test_too_short(self, password):
        assert validate_password(password) == (False, PASSWORD_LENGTH_MESSAGE)

    @pytest.mark.parametrize("password", [
        "alllower1",
        "ALLUPPER1",
        "NoDigitsHere",
        "Abcdefgh\u00b2",  # superscript two
        "Abcdefgh\uff11",  # fullwidth one
        "\u00c9\u00c9\u00c9\u00c9abc1",  # accented capitals only
    ])
    def test_missing_character_class(self, password):
        assert validate_password(password) == (False, PASSWORD_COMPOSITION_MESSAGE)


class TestContactNumberValidation:

    @pytest.mark.parametrize("number", ["03001234567", "+92 300 1234567", "(042) 123-4567", "555.123.4567"])
    def test_valid(self, number):
        assert validate_contact_number(number) == (True, None)

    @pytest.mark.parametrize("number", ["", None, "call me", "12-ab-34", "+"])
    def test_invalid(self, number):
        assert validate_contact_number(number) == (False, INVALID_CONTACT_MESSAGE)

