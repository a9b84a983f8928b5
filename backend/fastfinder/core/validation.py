"""
Input format checks shared by the auth and item endpoints.

Each check returns ``(is_valid, message)`` so callers can surface the
message directly in the response envelope.
"""
import re
from typing import Optional, Tuple


EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
CONTACT_NUMBER_PATTERN = re.compile(
    r"^[+]?[(]?[0-9]{1,4}[)]?[-\s.]?[0-9]{1,3}[-\s.]?[0-9]{1,4}[-\s.]?[0-9]{1,4}$"
)
MIN_PASSWORD_LENGTH = 8
# ASCII classes only, so superscript or fullwidth digits do not count
UPPERCASE_PATTERN = re.compile(r"[A-Z]")
LOWERCASE_PATTERN = re.compile(r"[a-z]")
DIGIT_PATTERN = re.compile(r"[0-9]")

INVALID_EMAIL_MESSAGE = "Please enter a valid email address"
INVALID_CONTACT_MESSAGE = "Please enter a valid contact number"
PASSWORD_LENGTH_MESSAGE = "Password must be at least 8 characters long"
PASSWORD_COMPOSITION_MESSAGE = (
    "Password must contain at least one uppercase letter, one lowercase letter, and one number"
)


def normalize_email(email: Optional[str]) -> str:
    """Emails are stored and looked up trimmed and lowercased"""
    return (email or "").strip().lower()


def validate_email(email: Optional[str]) -> Tuple[bool, Optional[str]]:
    if not email or not EMAIL_PATTERN.match(email.strip()):
        return False, INVALID_EMAIL_MESSAGE
    return True, None


def validate_password(password: Optional[str]) -> Tuple[bool, Optional[str]]:
    """Minimum length plus at least one upper, one lower and one digit"""
    password = password or ""
    if len(password) < MIN_PASSWORD_LENGTH:
        return False, PASSWORD_LENGTH_MESSAGE

    if not all(pattern.search(password) for pattern in (UPPERCASE_PATTERN, LOWERCASE_PATTERN, DIGIT_PATTERN)):
        return False, PASSWORD_COMPOSITION_MESSAGE

    return True, None


def validate_contact_number(contact_number: Optional[str]) -> Tuple[bool, Optional[str]]:
    if not contact_number or not CONTACT_NUMBER_PATTERN.match(contact_number.strip()):
        return False, INVALID_CONTACT_MESSAGE
    return True, None

