from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.responses import Response
from typing import Optional

from fastfinder.core.config import settings
from fastfinder.core.database import get_db
from fastfinder.core.exceptions import AuthenticationError, InvalidTokenError
from fastfinder.core.logging_config import logger, set_user_id
from fastfinder.core.security import token_codec
from fastfinder.models.user import User
from fastfinder.services.auth_service import AuthService
from fastfinder.services.credential_store import CredentialStore
from fastfinder.services.item_service import ItemService

# Browsers send the cookie; API clients may send a bearer header instead
security = HTTPBearer(auto_error=False)


def extract_session_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = None,
) -> Optional[str]:
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if token:
        return token
    if credentials is not None:
        return credentials.credentials
    return None


async def get_session_user_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """User id from a valid session token, else 401"""
    token = extract_session_token(request, credentials)
    if not token:
        raise AuthenticationError("Unauthorized")

    try:
        payload = token_codec.decode(token)
    except InvalidTokenError as e:
        logger.warning(f"[Auth] Rejected session token on {request.url.path}: {e.details.get('reason')}")
        raise

    user_id = payload["sub"]
    set_user_id(user_id)
    return user_id


async def get_current_user(
    user_id: str = Depends(get_session_user_id),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Get current authenticated user"""
    user = await CredentialStore(db).find_by_id(user_id)
    if user is None:
        # Token outlived its account
        raise AuthenticationError("Unauthorized")
    return user


def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(CredentialStore(db))


def get_item_service(db: AsyncSession = Depends(get_db)) -> ItemService:
    return ItemService(db)


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        path="/",
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )
