"""
Verification State Machine
==========================

Account verification:

    (none) --register--> Unverified(code, expiry) --verify--> Verified
                              ^            |
                              +--resend----+   (old code replaced)

Password reset, independent of the above:

    NoResetPending --forgot--> ResetPending(code, token, expiries) --reset--> NoResetPending

Codes are compared by exact string equality and every expiry check is
``now < expiry``. A missing expiry counts as expired. Failures raise the
matching FinderError and leave the record untouched.
"""

from datetime import datetime, timedelta
from typing import Callable, Dict, Optional, Tuple

from fastfinder.core.config import Settings, settings as default_settings
from fastfinder.core.exceptions import (
    AlreadyVerifiedError,
    CodeExpiredError,
    InvalidCodeError,
    UserNotFoundError,
)
from fastfinder.core.security import generate_otp, generate_random_token
from fastfinder.core.types import utcnow
from fastfinder.models.user import User
from fastfinder.services.credential_store import CredentialStore


RESET_TOKEN_LENGTH = 32


def _is_live(expiry: Optional[datetime], now: datetime) -> bool:
    return expiry is not None and now < expiry


class VerificationService:

    def __init__(
        self,
        store: CredentialStore,
        config: Optional[Settings] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        config = config or default_settings
        self.store = store
        self.clock = clock
        self.verification_ttl = timedelta(minutes=config.VERIFICATION_CODE_EXPIRE_MINUTES)
        self.reset_code_ttl = timedelta(minutes=config.RESET_CODE_EXPIRE_MINUTES)
        self.reset_token_ttl = timedelta(minutes=config.RESET_TOKEN_EXPIRE_MINUTES)

    # ------------------------------------------------------------------
    # Account verification
    # ------------------------------------------------------------------

    def new_verification_fields(self) -> Dict[str, object]:
        """Pending-code columns for a freshly created account"""
        return {
            "verification_code": generate_otp(),
            "verification_code_expires": self.clock() + self.verification_ttl,
        }

    async def verify(self, email: str, code: str) -> User:
        user = await self.store.find_by_email(email)
        if user is None:
            raise UserNotFoundError(email)

        # A verified account has no pending code, so a replay lands here too
        if user.verification_code is None or code != user.verification_code:
            raise InvalidCodeError()
        if not _is_live(user.verification_code_expires, self.clock()):
            raise CodeExpiredError()

        return await self.store.update(
            user,
            is_verified=True,
            verification_code=None,
            verification_code_expires=None,
        )

    async def resend(self, email: str) -> Tuple[User, str]:
        """Replace the pending code; the previous one stops working immediately"""
        user = await self.store.find_by_email(email)
        if user is None:
            raise UserNotFoundError(email)
        if user.is_verified:
            raise AlreadyVerifiedError()

        fields = self.new_verification_fields()
        await self.store.update(user, **fields)
        return user, fields["verification_code"]

    # ------------------------------------------------------------------
    # Password reset
    # ------------------------------------------------------------------

    async def request_reset(self, email: str) -> Optional[Tuple[User, str, str]]:
        """
        Move an existing account to ResetPending.

        Returns ``(user, code, token)`` or ``None`` for an unknown email;
        callers must not let that difference reach the client.
        """
        user = await self.store.find_by_email(email)
        if user is None:
            return None

        now = self.clock()
        code = generate_otp()
        token = generate_random_token(RESET_TOKEN_LENGTH)
        await self.store.update(
            user,
            reset_code=code,
            reset_code_expires=now + self.reset_code_ttl,
            reset_token=token,
            reset_token_expires=now + self.reset_token_ttl,
        )
        return user, code, token

    async def reset_with_code(self, email: str, code: str, new_password: str) -> User:
        user = await self.store.find_by_email(email)
        # Unknown email reads the same as a wrong code
        if user is None or user.reset_code is None or code != user.reset_code:
            raise InvalidCodeError("Invalid reset code")
        if not _is_live(user.reset_code_expires, self.clock()):
            raise CodeExpiredError("Reset code has expired")

        return await self._complete_reset(user, new_password)

    async def reset_with_token(self, token: str, new_password: str) -> User:
        user = await self.store.find_by_reset_token(token)
        if user is None:
            raise InvalidCodeError("Invalid reset token")
        if not _is_live(user.reset_token_expires, self.clock()):
            raise CodeExpiredError("Reset token has expired")

        return await self._complete_reset(user, new_password)

    async def _complete_reset(self, user: User, new_password: str) -> User:
        return await self.store.update(
            user,
            password=new_password,
            reset_code=None,
            reset_code_expires=None,
            reset_token=None,
            reset_token_expires=None,
        )
