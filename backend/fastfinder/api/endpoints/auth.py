from fastapi import APIRouter, Depends, Request, status

from fastfinder.core.rate_limiter import (
    limiter,
    LOGIN_LIMIT,
    REGISTER_LIMIT,
    VERIFY_LIMIT,
    RESEND_LIMIT,
    FORGOT_PASSWORD_LIMIT,
    RESET_PASSWORD_LIMIT,
)
from fastfinder.core.result import Ok, render_result
from fastfinder.modules.auth.dependencies import (
    get_auth_service,
    get_session_user_id,
    set_session_cookie,
    clear_session_cookie,
)
from fastfinder.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    VerifyRequest,
    ResendCodeRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
)
from fastfinder.services.auth_service import AuthService

router = APIRouter()


def _respond(result, status_code: int = status.HTTP_200_OK):
    """Render a result; an issued session token goes into the cookie only"""
    response = render_result(result, status_code)
    if isinstance(result, Ok) and result.session_token:
        set_session_cookie(response, result.session_token)
    return response


@router.post("/register", status_code=status.HTTP_201_CREATED)
@limiter.limit(REGISTER_LIMIT)
async def register(
    request: Request,
    data: RegisterRequest,
    auth: AuthService = Depends(get_auth_service),
):
    """Create an unverified account and send its verification code"""
    return _respond(await auth.register(data), status.HTTP_201_CREATED)


@router.post("/login")
@limiter.limit(LOGIN_LIMIT)
async def login(
    request: Request,
    data: LoginRequest,
    auth: AuthService = Depends(get_auth_service),
):
    """Check credentials and start a session (HTTP-only cookie)"""
    return _respond(await auth.login(data))


@router.post("/logout")
async def logout(
    request: Request,
    auth: AuthService = Depends(get_auth_service),
):
    """
    Clear the session cookie.

    The token itself stays valid until it expires; there is no server-side
    revocation.
    """
    response = _respond(await auth.logout())
    clear_session_cookie(response)
    return response


@router.get("/me")
async def get_current_user_info(
    user_id: str = Depends(get_session_user_id),
    auth: AuthService = Depends(get_auth_service),
):
    return _respond(await auth.me(user_id))


@router.post("/verify")
@limiter.limit(VERIFY_LIMIT)
async def verify_email(
    request: Request,
    data: VerifyRequest,
    auth: AuthService = Depends(get_auth_service),
):
    """Confirm the emailed code; a verified user is logged in straight away"""
    return _respond(await auth.verify(data))


@router.post("/resend-otp")
@limiter.limit(RESEND_LIMIT)
async def resend_verification_code(
    request: Request,
    data: ResendCodeRequest,
    auth: AuthService = Depends(get_auth_service),
):
    return _respond(await auth.resend_code(data))


@router.post("/forgot-password")
@limiter.limit(FORGOT_PASSWORD_LIMIT)
async def forgot_password(
    request: Request,
    data: ForgotPasswordRequest,
    auth: AuthService = Depends(get_auth_service),
):
    """Same response whether or not the email is registered"""
    return _respond(await auth.forgot_password(data))


@router.post("/reset-password")
@limiter.limit(RESET_PASSWORD_LIMIT)
async def reset_password(
    request: Request,
    data: ResetPasswordRequest,
    auth: AuthService = Depends(get_auth_service),
):
    return _respond(await auth.reset_password(data))
