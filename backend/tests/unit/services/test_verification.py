"""
Unit Tests for the verification state machine
Tests for: account verification, resend, password reset (code and token)
"""
import pytest
from datetime import datetime, timedelta

from fastfinder.core.exceptions import (
    AlreadyVerifiedError,
    CodeExpiredError,
    InvalidCodeError,
    UserNotFoundError,
)
from fastfinder.services.credential_store import CredentialStore
from fastfinder.services.verification import VerificationService

T0 = datetime(2024, 3, 1, 12, 0, 0)


class FrozenClock:

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(T0)


@pytest.fixture
def store(db_session) -> CredentialStore:
    return CredentialStore(db_session)


@pytest.fixture
def verification(store, clock) -> VerificationService:
    return VerificationService(store, clock=clock)


@pytest.fixture
def fixed_codes(monkeypatch):
    """Deterministic OTP sequence"""
    codes = iter(["111111", "222222", "333333", "444444"])
    monkeypatch.setattr("fastfinder.services.verification.generate_otp", lambda: next(codes))


@pytest.fixture
async def pending_user(store, verification, fixed_codes):
    """Freshly registered account holding code 111111"""
    return await store.create(
        name="Alice",
        email="alice@x.com",
        raw_password="Passw0rd",
        contact_number="03001234567",
        **verification.new_verification_fields(),
    )


class TestAccountVerification:

    @pytest.mark.asyncio
    async def test_new_account_is_unverified_with_pending_code(self, pending_user):
        assert pending_user.is_verified is False
        assert pending_user.verification_code == "111111"
        assert pending_user.verification_code_expires == T0 + timedelta(minutes=15)

    @pytest.mark.asyncio
    async def test_correct_code_verifies_and_clears(self, verification, pending_user):
        user = await verification.verify("alice@x.com", "111111")

        assert user.is_verified is True
        assert user.verification_code is None
        assert user.verification_code_expires is None

    @pytest.mark.asyncio
    async def test_email_lookup_is_case_insensitive(self, verification, pending_user):
        user = await verification.verify("  ALICE@x.com ", "111111")

        assert user.is_verified is True

    @pytest.mark.asyncio
    async def test_wrong_code_leaves_state(self, verification, pending_user):
        with pytest.raises(InvalidCodeError):
            await verification.verify("alice@x.com", "999999")

        assert pending_user.is_verified is False
        assert pending_user.verification_code == "111111"

    @pytest.mark.asyncio
    async def test_code_comparison_is_exact(self, verification, pending_user):
        with pytest.raises(InvalidCodeError):
            await verification.verify("alice@x.com", " 111111")

    @pytest.mark.asyncio
    async def test_accepted_just_before_expiry(self, verification, pending_user, clock):
        clock.advance(minutes=15, seconds=-1)

        user = await verification.verify("alice@x.com", "111111")

        assert user.is_verified is True

    @pytest.mark.asyncio
    async def test_rejected_at_expiry(self, verification, pending_user, clock):
        clock.advance(minutes=15)

        with pytest.raises(CodeExpiredError):
            await verification.verify("alice@x.com", "111111")

        assert pending_user.is_verified is False

    @pytest.mark.asyncio
    async def test_replay_after_success_fails(self, verification, pending_user):
        await verification.verify("alice@x.com", "111111")

        with pytest.raises(InvalidCodeError):
            await verification.verify("alice@x.com", "111111")

    @pytest.mark.asyncio
    async def test_unknown_email(self, verification):
        with pytest.raises(UserNotFoundError):
            await verification.verify("nobody@x.com", "111111")


class TestResend:

    @pytest.mark.asyncio
    async def test_resend_replaces_code_and_expiry(self, verification, pending_user, clock):
        clock.advance(minutes=10)

        user, code = await verification.resend("alice@x.com")

        assert code == "222222"
        assert user.verification_code == "222222"
        assert user.verification_code_expires == clock.now + timedelta(minutes=15)

    @pytest.mark.asyncio
    async def test_old_code_invalid_after_resend(self, verification, pending_user):
        await verification.resend("alice@x.com")

        with pytest.raises(InvalidCodeError):
            await verification.verify("alice@x.com", "111111")

        user = await verification.verify("alice@x.com", "222222")
        assert user.is_verified is True

    @pytest.mark.asyncio
    async def test_resend_revives_expired_account(self, verification, pending_user, clock):
        clock.advance(hours=2)
        await verification.resend("alice@x.com")

        user = await verification.verify("alice@x.com", "222222")

        assert user.is_verified is True

    @pytest.mark.asyncio
    async def test_resend_for_verified_user_rejected(self, verification, pending_user):
        await verification.verify("alice@x.com", "111111")

        with pytest.raises(AlreadyVerifiedError):
            await verification.resend("alice@x.com")

    @pytest.mark.asyncio
    async def test_resend_unknown_email(self, verification):
        with pytest.raises(UserNotFoundError):
            await verification.resend("nobody@x.com")


class TestPasswordReset:

    @pytest.mark.asyncio
    async def test_unknown_email_returns_none(self, verification):
        assert await verification.request_reset("nobody@x.com") is None

    @pytest.mark.asyncio
    async def test_request_sets_pending_reset(self, verification, pending_user, clock):
        user, code, token = await verification.request_reset("alice@x.com")

        assert code == "222222"
        assert len(token) == 32
        assert user.reset_code_expires == T0 + timedelta(minutes=15)
        assert user.reset_token_expires == T0 + timedelta(minutes=60)

    @pytest.mark.asyncio
    async def test_reset_with_code(self, store, verification, pending_user):
        await verification.request_reset("alice@x.com")

        user = await verification.reset_with_code("alice@x.com", "222222", "NewPassw0rd")

        assert store.verify_password(user, "NewPassw0rd")
        assert not store.verify_password(user, "Passw0rd")
        assert user.reset_code is None
        assert user.reset_token is None

    @pytest.mark.asyncio
    async def test_reset_code_single_use(self, verification, pending_user):
        await verification.request_reset("alice@x.com")
        await verification.reset_with_code("alice@x.com", "222222", "NewPassw0rd")

        with pytest.raises(InvalidCodeError):
            await verification.reset_with_code("alice@x.com", "222222", "Other1234")

    @pytest.mark.asyncio
    async def test_wrong_reset_code(self, verification, pending_user):
        await verification.request_reset("alice@x.com")

        with pytest.raises(InvalidCodeError) as exc_info:
            await verification.reset_with_code("alice@x.com", "000000", "NewPassw0rd")

        assert exc_info.value.message == "Invalid reset code"

    @pytest.mark.asyncio
    async def test_reset_code_expired(self, verification, pending_user, clock):
        await verification.request_reset("alice@x.com")
        clock.advance(minutes=15)

        with pytest.raises(CodeExpiredError) as exc_info:
            await verification.reset_with_code("alice@x.com", "222222", "NewPassw0rd")

        assert exc_info.value.message == "Reset code has expired"

    @pytest.mark.asyncio
    async def test_reset_with_token_outlives_code(self, store, verification, pending_user, clock):
        _, _, token = await verification.request_reset("alice@x.com")
        clock.advance(minutes=30)

        user = await verification.reset_with_token(token, "NewPassw0rd")

        assert store.verify_password(user, "NewPassw0rd")

    @pytest.mark.asyncio
    async def test_reset_token_expired(self, verification, pending_user, clock):
        _, _, token = await verification.request_reset("alice@x.com")
        clock.advance(minutes=60)

        with pytest.raises(CodeExpiredError):
            await verification.reset_with_token(token, "NewPassw0rd")

    @pytest.mark.asyncio
    async def test_unknown_reset_token(self, verification):
        with pytest.raises(InvalidCodeError):
            await verification.reset_with_token("x" * 32, "NewPassw0rd")

    @pytest.mark.asyncio
    async def test_reset_does_not_touch_verification_state(self, verification, pending_user):
        await verification.request_reset("alice@x.com")
        user = await verification.reset_with_code("alice@x.com", "222222", "NewPassw0rd")

        assert user.is_verified is False
        assert user.verification_code == "111111"
