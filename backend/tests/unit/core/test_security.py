"""
Unit Tests for Security Module
Tests for: password hashing, one-time codes, session tokens
"""
import string
import pytest
from datetime import datetime, timedelta
from jose import jwt

from fastfinder.core.exceptions import InvalidTokenError
from fastfinder.core.security import (
    SessionTokenCodec,
    generate_otp,
    generate_random_token,
    get_password_hash,
    verify_password,
)

SECRET = "unit-test-secret"
T0 = datetime(2024, 3, 1, 12, 0, 0)


class FrozenClock:
    """Callable clock the tests move by hand"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(T0)


@pytest.fixture
def codec(clock) -> SessionTokenCodec:
    return SessionTokenCodec(secret=SECRET, lifetime=timedelta(days=7), clock=clock)


class TestPasswordHashing:
    """Test password hashing functions"""

    def test_hash_is_not_the_password(self):
        hashed = get_password_hash("Secret123")

        assert hashed != "Secret123"
        assert hashed.startswith("$2")

    def test_hash_password_different_each_time(self):
        """Bcrypt generates a fresh salt per hash"""
        assert get_password_hash("Secret123") != get_password_hash("Secret123")

    def test_verify_password_correct(self):
        hashed = get_password_hash("Secret123")

        assert verify_password("Secret123", hashed) is True

    def test_verify_password_incorrect(self):
        hashed = get_password_hash("Secret123")

        assert verify_password("secret123", hashed) is False

    def test_verify_password_without_hash(self):
        assert verify_password("Secret123", None) is False
        assert verify_password("Secret123", "") is False

    def test_long_password_truncated_to_72_bytes(self):
        """Bytes beyond bcrypt's limit do not affect the result"""
        base = "A1" + "x" * 70
        hashed = get_password_hash(base + "tail-one")

        assert verify_password(base + "tail-two", hashed) is True


class TestOneTimeCodes:
    """Test OTP and reset token generation"""

    def test_otp_is_six_digits_in_range(self):
        for _ in range(200):
            code = generate_otp()
            assert len(code) == 6
            assert code.isdigit()
            assert 100000 <= int(code) <= 999999

    def test_otp_varies(self):
        assert len({generate_otp() for _ in range(50)}) > 1

    def test_random_token_default_length_and_alphabet(self):
        token = generate_random_token()

        assert len(token) == 32
        assert set(token) <= set(string.ascii_letters + string.digits)

    def test_random_token_custom_length(self):
        assert len(generate_random_token(8)) == 8

    def test_random_token_rejects_non_positive_length(self):
        with pytest.raises(ValueError):
            generate_random_token(0)


class TestSessionTokenCodec:
    """Test issuing and verifying session tokens"""

    def test_issue_and_verify(self, codec):
        token = codec.issue("user-123")

        payload = codec.verify(token)

        assert payload["sub"] == "user-123"
        assert payload["exp"] - payload["iat"] == 7 * 24 * 60 * 60

    def test_token_uses_hs256(self, codec):
        token = codec.issue("user-123")

        assert jwt.get_unverified_header(token)["alg"] == "HS256"

    def test_accepted_one_second_before_expiry(self, codec, clock):
        token = codec.issue("user-123")
        clock.now = T0 + timedelta(days=7) - timedelta(seconds=1)

        assert codec.verify(token) is not None

    def test_rejected_at_expiry(self, codec, clock):
        token = codec.issue("user-123")
        clock.now = T0 + timedelta(days=7)

        assert codec.verify(token) is None

    def test_expired_reason_is_internal(self, codec, clock):
        token = codec.issue("user-123")
        clock.now = T0 + timedelta(days=8)

        with pytest.raises(InvalidTokenError) as exc_info:
            codec.decode(token)

        assert exc_info.value.message == "Invalid token"
        assert exc_info.value.details["reason"] == "expired"

    def test_wrong_secret_rejected(self, codec, clock):
        token = codec.issue("user-123")
        other = SessionTokenCodec(secret="another-secret", clock=clock)

        assert other.verify(token) is None

    def test_tampered_payload_rejected(self, codec):
        token = codec.issue("user-123")
        header, payload, signature = token.split(".")
        forged = jwt.encode({"sub": "admin", "iat": 0, "exp": 2**31}, "guess", algorithm="HS256")

        assert codec.verify(".".join([header, forged.split(".")[1], signature])) is None

    @pytest.mark.parametrize("token", ["", None, "garbage", "a.b.c"])
    def test_malformed_tokens_rejected(self, codec, token):
        assert codec.verify(token) is None

    def test_token_without_subject_rejected(self, codec):
        token = jwt.encode({"iat": 0, "exp": 2**31}, SECRET, algorithm="HS256")

        with pytest.raises(InvalidTokenError):
            codec.decode(token)

    def test_empty_secret_refused(self):
        with pytest.raises(ValueError):
            SessionTokenCodec(secret="")
