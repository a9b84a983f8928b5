"""
Custom Exceptions for FAST Finder
=================================

Lower layers (credential store, token codec, verification state machine)
raise these; the service layer turns them into ``Err`` results and the API
layer renders them with the matching HTTP status.

Usage:
    from fastfinder.core.exceptions import DuplicateEmailError

    if existing:
        raise DuplicateEmailError(email)
"""

from typing import Optional, Any, Dict


class FinderError(Exception):
    """Base exception for all FAST Finder errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(FinderError):
    """Input validation failed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class DuplicateEmailError(ValidationError):
    """Email already belongs to another account"""

    def __init__(self, email: str):
        super().__init__("Email already in use", field="email")
        self.code = "DUPLICATE_EMAIL"
        self.details["email"] = email


class InvalidCodeError(ValidationError):
    """Submitted one-time code does not match the pending one"""

    def __init__(self, message: str = "Invalid verification code"):
        super().__init__(message, field="code")
        self.code = "INVALID_CODE"


class CodeExpiredError(ValidationError):
    """Pending one-time code is past its expiry"""

    def __init__(self, message: str = "Verification code has expired"):
        super().__init__(message, field="code")
        self.code = "CODE_EXPIRED"


class AlreadyVerifiedError(ValidationError):
    """Account is already verified"""

    def __init__(self):
        super().__init__("User is already verified")
        self.code = "ALREADY_VERIFIED"


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(FinderError):
    """User authentication failed"""

    status_code = 401

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, code="AUTH_FAILED")


class InvalidTokenError(AuthenticationError):
    """Session token is malformed, forged or expired.

    The concrete reason stays in ``details`` for logging only.
    """

    def __init__(self, reason: str = "invalid"):
        super().__init__("Invalid token")
        self.code = "INVALID_TOKEN"
        self.details = {"reason": reason}


class UnverifiedAccountError(FinderError):
    """Credentials are correct but the email is not verified yet"""

    status_code = 403

    def __init__(self, email: str):
        super().__init__(
            "Please verify your email before logging in",
            code="EMAIL_NOT_VERIFIED",
            details={"email": email}
        )


class AuthorizationError(FinderError):
    """User not authorized for this action"""

    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="NOT_AUTHORIZED")


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(FinderError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} not found",
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class UserNotFoundError(ResourceNotFoundError):
    """User not found"""

    def __init__(self, user_ref: str):
        super().__init__("User", user_ref)


class ItemNotFoundError(ResourceNotFoundError):
    """Item not found"""

    def __init__(self, item_id: str):
        super().__init__("Item", item_id)


def error_response(error: FinderError) -> Dict[str, Any]:
    """Convert exception to API error envelope"""
    return {
        "success": False,
        "error": error.message,
        "code": error.code,
    }
