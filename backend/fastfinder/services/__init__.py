from fastfinder.services.credential_store import CredentialStore
from fastfinder.services.verification import VerificationService
from fastfinder.services.email_service import EmailService, email_service
from fastfinder.services.auth_service import AuthService
from fastfinder.services.item_service import ItemService

__all__ = [
    "CredentialStore",
    "VerificationService",
    "EmailService",
    "email_service",
    "AuthService",
    "ItemService",
]
