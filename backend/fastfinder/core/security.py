from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional
from jose import JWTError, jwt
import bcrypt
import secrets
import string

from fastfinder.core.config import settings
from fastfinder.core.exceptions import InvalidTokenError
from fastfinder.core.logging_config import logger


OTP_MIN = 100000
OTP_MAX = 999999
TOKEN_ALPHABET = string.ascii_letters + string.digits


# ============================================
# Password hashing
# ============================================

def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify password against a bcrypt hash"""
    if not hashed_password:
        return False
    # Bcrypt has a 72 byte limit - truncate password if necessary
    password_bytes = plain_password.encode('utf-8')[:72]
    return bcrypt.checkpw(password_bytes, hashed_password.encode('utf-8'))


def get_password_hash(password: str, rounds: Optional[int] = None) -> str:
    """Hash password with a fresh salt (BCRYPT_ROUNDS in .env)"""
    password_bytes = password.encode('utf-8')[:72]
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password_bytes, salt).decode('utf-8')


# ============================================
# One-time codes and reset tokens
# ============================================

def generate_otp() -> str:
    """Six-digit numeric code, uniform over [100000, 999999]"""
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


def generate_random_token(length: int = 32) -> str:
    """Alphanumeric token, each character drawn uniformly"""
    if length < 1:
        raise ValueError("Token length must be positive")
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


# ============================================
# Session tokens
# ============================================

class SessionTokenCodec:
    """
    Signs and verifies stateless session tokens (HS256 JWT).

    A token carries ``sub`` (user id), ``iat`` and ``exp``. It is valid while
    the signature checks out and ``now < exp``; there is no revocation list.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        lifetime: timedelta = timedelta(days=7),
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        if not secret:
            raise ValueError("Session signing secret is empty")
        self._secret = secret
        self._algorithm = algorithm
        self._lifetime = lifetime
        self._clock = clock

    @property
    def lifetime(self) -> timedelta:
        return self._lifetime

    def issue(self, user_id: str) -> str:
        """Create a signed token bound to ``user_id``"""
        issued_at = self._clock()
        claims = {
            "sub": str(user_id),
            "iat": _timestamp(issued_at),
            "exp": _timestamp(issued_at + self._lifetime),
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> Dict[str, Any]:
        """
        Return the payload of a valid token.

        Raises InvalidTokenError for a malformed token, a bad signature or an
        expired one; the concrete reason is only kept for logging.
        """
        if not token:
            raise InvalidTokenError("missing")

        try:
            # Expiry is checked below against the injected clock
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"verify_exp": False, "verify_iat": False},
            )
        except JWTError as e:
            raise InvalidTokenError(f"signature: {e}")

        exp = payload.get("exp")
        if not isinstance(exp, (int, float)):
            raise InvalidTokenError("missing exp claim")
        if not payload.get("sub"):
            raise InvalidTokenError("missing sub claim")
        if not _timestamp(self._clock()) < exp:
            raise InvalidTokenError("expired")

        return payload

    def verify(self, token: Optional[str]) -> Optional[Dict[str, Any]]:
        """Collapse every failure into ``None``; the reason is logged"""
        try:
            return self.decode(token or "")
        except InvalidTokenError as e:
            logger.debug(f"[Session] Token rejected: {e.details.get('reason')}")
            return None


def _timestamp(moment: datetime) -> int:
    # Naive datetimes are UTC throughout the app
    return int((moment - datetime(1970, 1, 1)).total_seconds())


token_codec = SessionTokenCodec(
    secret=settings.JWT_SECRET,
    algorithm=settings.JWT_ALGORITHM,
    lifetime=timedelta(days=settings.SESSION_EXPIRE_DAYS),
)
