"""
Auth Service
============
Orchestrates register / login / logout / me / verify / resend / forgot /
reset on top of the credential store, the verification state machine, the
session token codec and the email service.

Every operation returns a ``Result``. FinderErrors raised below are turned
into ``Err`` here; anything else propagates to the global 500 handler.
"""

from typing import Optional

from fastfinder.core.config import Settings, settings as default_settings
from fastfinder.core.exceptions import FinderError, UnverifiedAccountError
from fastfinder.core.logging_config import logger
from fastfinder.core.result import Err, ErrorKind, Ok, Result
from fastfinder.core.security import SessionTokenCodec, generate_otp, token_codec
from fastfinder.core.validation import (
    normalize_email,
    validate_contact_number,
    validate_email,
    validate_password,
)
from fastfinder.schemas.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResendCodeRequest,
    ResetPasswordRequest,
    UserPublic,
    VerifyRequest,
)
from fastfinder.services.credential_store import CredentialStore
from fastfinder.services.email_service import EmailService, email_service as default_email_service
from fastfinder.services.verification import VerificationService

REGISTERED_MESSAGE = "Registration successful! Please check your email for the verification code."
EMAIL_DELAYED_WARNING = "Email delivery might be delayed"
FORGOT_PASSWORD_MESSAGE = "If your email is registered, you will receive a password reset code"
RESET_SUCCESS_MESSAGE = "Password reset successful! You can now log in with your new password."


def _invalid(message: str) -> Err:
    return Err(ErrorKind.VALIDATION, message)


def _public(user) -> dict:
    return UserPublic.model_validate(user).model_dump(by_alias=True)


class AuthService:

    def __init__(
        self,
        store: CredentialStore,
        verification: Optional[VerificationService] = None,
        codec: Optional[SessionTokenCodec] = None,
        mailer: Optional[EmailService] = None,
        config: Optional[Settings] = None,
    ):
        self.config = config or default_settings
        self.store = store
        self.verification = verification or VerificationService(store, self.config)
        self.codec = codec or token_codec
        self.mailer = mailer or default_email_service
        self.expose_codes = self.config.EXPOSE_CODES_IN_RESPONSE

    # ------------------------------------------------------------------

    async def register(self, data: RegisterRequest) -> Result:
        if not all([data.name, data.email, data.password, data.confirm_password, data.contact_number]):
            return _invalid("Please fill in all fields")
        if data.password != data.confirm_password:
            return _invalid("Passwords do not match")

        for is_valid, message in (
            validate_email(data.email),
            validate_password(data.password),
            validate_contact_number(data.contact_number),
        ):
            if not is_valid:
                logger.log_auth_event(event="register", success=False, user_email=data.email, reason=message)
                return _invalid(message)

        pending = self.verification.new_verification_fields()
        try:
            user = await self.store.create(
                name=data.name,
                email=data.email,
                raw_password=data.password,
                contact_number=data.contact_number,
                **pending,
            )
        except FinderError as e:
            logger.log_auth_event(event="register", success=False, user_email=data.email, reason=e.code)
            return Err.from_error(e)

        code = pending["verification_code"]
        delivered = await self.mailer.send_verification_email(user.email, user.name, code)
        logger.log_auth_event(event="register", success=True, user_email=user.email, email_delivered=delivered)

        payload = {}
        if self.expose_codes:
            payload["verificationCode"] = code
        if not delivered:
            payload["warning"] = EMAIL_DELAYED_WARNING
        return Ok(payload, REGISTERED_MESSAGE)

    async def login(self, data: LoginRequest) -> Result:
        if not data.email or not data.password:
            return _invalid("Email and password are required")

        user = await self.store.find_by_email(data.email)
        # Password first: the unverified state is only revealed to the password holder
        if user is None or not self.store.verify_password(user, data.password):
            logger.log_auth_event(event="login", success=False, user_email=data.email, reason="invalid_credentials")
            return Err(ErrorKind.AUTHENTICATION, "Invalid email or password")

        if not user.is_verified:
            logger.log_auth_event(event="login", success=False, user_email=user.email, reason="unverified")
            return Err.from_error(UnverifiedAccountError(user.email), needsVerification=True, email=user.email)

        logger.log_auth_event(event="login", success=True, user_email=user.email)
        return Ok({"user": _public(user)}, "Login successful", session_token=self.codec.issue(user.id))

    async def logout(self, user_id: Optional[str] = None) -> Result:
        logger.log_auth_event(event="logout", success=True, user_id=user_id)
        return Ok(message="Logged out successfully")

    async def me(self, user_id: str) -> Result:
        user = await self.store.find_by_id(user_id)
        if user is None:
            return Err(ErrorKind.NOT_FOUND, "User not found")
        return Ok({"user": _public(user)})

    async def verify(self, data: VerifyRequest) -> Result:
        if not data.email or not data.code:
            return _invalid("Email and verification code are required")

        try:
            user = await self.verification.verify(data.email, data.code)
        except FinderError as e:
            logger.log_auth_event(event="verify", success=False, user_email=data.email, reason=e.code)
            return Err.from_error(e)

        logger.log_auth_event(event="verify", success=True, user_email=user.email)
        return Ok(
            {"user": _public(user)},
            "Email verified successfully!",
            session_token=self.codec.issue(user.id),
        )

    async def resend_code(self, data: ResendCodeRequest) -> Result:
        if not data.email:
            return _invalid("Email is required")

        try:
            user, code = await self.verification.resend(data.email)
        except FinderError as e:
            logger.log_auth_event(event="resend", success=False, user_email=data.email, reason=e.code)
            return Err.from_error(e)

        delivered = await self.mailer.send_verification_email(user.email, user.name, code)
        logger.log_auth_event(event="resend", success=True, user_email=user.email, email_delivered=delivered)

        payload = {}
        if self.expose_codes:
            payload["verificationCode"] = code
        if not delivered:
            payload["warning"] = EMAIL_DELAYED_WARNING
        return Ok(payload, "Verification code has been sent to your email.")

    async def forgot_password(self, data: ForgotPasswordRequest) -> Result:
        if not data.email:
            return _invalid("Please provide your email address")

        pending = await self.verification.request_reset(data.email)
        if pending is None:
            logger.log_auth_event(event="forgot_password", success=False,
                                  user_email=normalize_email(data.email), reason="unknown_email")
            # Decoy keeps the response indistinguishable from a real request
            code = generate_otp()
        else:
            user, code, token = pending
            delivered = await self.mailer.send_password_reset_email(user.email, user.name, code, token)
            logger.log_auth_event(event="forgot_password", success=True,
                                  user_email=user.email, email_delivered=delivered)

        payload = {"resetCode": code} if self.expose_codes else {}
        return Ok(payload, FORGOT_PASSWORD_MESSAGE)

    async def reset_password(self, data: ResetPasswordRequest) -> Result:
        by_token = bool(data.token) and not data.code
        if by_token:
            required = [data.token, data.password, data.confirm_password]
        else:
            required = [data.email, data.code, data.password, data.confirm_password]
        if not all(required):
            return _invalid("Please fill in all fields")
        if data.password != data.confirm_password:
            return _invalid("Passwords do not match")

        is_valid, message = validate_password(data.password)
        if not is_valid:
            return _invalid(message)

        try:
            if by_token:
                user = await self.verification.reset_with_token(data.token, data.password)
            else:
                user = await self.verification.reset_with_code(data.email, data.code, data.password)
        except FinderError as e:
            logger.log_auth_event(event="reset_password", success=False, user_email=data.email, reason=e.code)
            return Err.from_error(e)

        logger.log_auth_event(event="reset_password", success=True, user_email=user.email)
        return Ok(message=RESET_SUCCESS_MESSAGE)
