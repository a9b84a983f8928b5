"""
Rate Limiting for FAST Finder API
=================================
Per-client limits on the auth endpoints using slowapi.

There is no per-account lockout; brute force against one-time codes is
bounded by these per-client windows plus the code expiry:
- /auth/login: 5 req/min
- /auth/register: 3 req/min
- /auth/verify: 10 req/min
- /auth/resend-otp: 3 req/min
- /auth/forgot-password: 3 req/min
- /auth/reset-password: 10 req/min
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from fastfinder.core.config import settings
from fastfinder.core.logging_config import logger


LOGIN_LIMIT = "5/minute"
REGISTER_LIMIT = "3/minute"
VERIFY_LIMIT = "10/minute"
RESEND_LIMIT = "3/minute"
FORGOT_PASSWORD_LIMIT = "3/minute"
RESET_PASSWORD_LIMIT = "10/minute"


def get_client_identifier(request: Request) -> str:
    """Rate limit key: the client address"""
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_client_identifier,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """429 in the usual envelope, with a Retry-After hint"""
    logger.warning(
        f"[RateLimit] Exceeded for {get_client_identifier(request)} on {request.url.path}: {exc.detail}"
    )

    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "error": "Too many requests. Please try again later.",
        },
        headers={"Retry-After": "60"},
    )
