"""
Session Gateway
===============
Route guard for page navigations. Runs before any handler and decides,
from the path and the session cookie alone, whether to pass the request
through or redirect it:

- protected path, no token          -> /login?redirect=<path>
- protected path, invalid token     -> /login, session cookie cleared
- auth-only path, valid token       -> ``redirect`` query target or /dashboard
- anything else                     -> pass through

The decision is a pure function (``evaluate_route``) so it can be tested
without an app; ``SessionGatewayMiddleware`` applies it to requests.
"""

from dataclasses import dataclass
from typing import Callable, Iterable, Mapping, Optional, Tuple
from urllib.parse import urlencode

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response
from starlette.types import ASGIApp

from fastfinder.core.config import settings
from fastfinder.core.logging_config import logger
from fastfinder.core.security import token_codec

PROTECTED_PREFIXES: Tuple[str, ...] = ("/dashboard", "/report", "/my-items", "/item")
AUTH_ONLY_PREFIXES: Tuple[str, ...] = ("/login", "/register", "/forgot-password", "/reset-password", "/verify")
EXCLUDED_PREFIXES: Tuple[str, ...] = (
    settings.API_PREFIX,
    "/static",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/health",
    "/favicon.ico",
)

LOGIN_PATH = "/login"
DASHBOARD_PATH = "/dashboard"


@dataclass(frozen=True)
class RouteDecision:
    """Outcome for one request; ``redirect_to`` is None for pass-through"""
    redirect_to: Optional[str] = None
    clear_session: bool = False
    reason: str = "pass"

    @property
    def passes(self) -> bool:
        return self.redirect_to is None


PASS = RouteDecision()


def matches_prefix(path: str, prefixes: Iterable[str]) -> bool:
    """Segment-aware: ``/item`` matches ``/item`` and ``/item/x`` but not ``/items``"""
    for prefix in prefixes:
        prefix = prefix.rstrip("/") or "/"
        if path == prefix or path.startswith(prefix + "/"):
            return True
    return False


def is_safe_redirect(target: Optional[str]) -> bool:
    """Only site-relative targets; ``//host`` and ``/\\host`` would leave the site"""
    if not target or not target.startswith("/"):
        return False
    return not target.startswith("//") and not target.startswith("/\\")


def evaluate_route(
    path: str,
    query_params: Mapping[str, str],
    token: Optional[str],
    verifier: Callable[[str], Optional[dict]],
) -> RouteDecision:
    if matches_prefix(path, EXCLUDED_PREFIXES):
        return PASS

    if matches_prefix(path, PROTECTED_PREFIXES):
        if not token:
            return RouteDecision(
                redirect_to=f"{LOGIN_PATH}?{urlencode({'redirect': path})}",
                reason="no_session",
            )
        if verifier(token) is None:
            # Corrupt or expired sessions count as logged out
            return RouteDecision(redirect_to=LOGIN_PATH, clear_session=True, reason="invalid_session")
        return PASS

    if matches_prefix(path, AUTH_ONLY_PREFIXES):
        if token and verifier(token) is not None:
            target = query_params.get("redirect")
            return RouteDecision(
                redirect_to=target if is_safe_redirect(target) else DASHBOARD_PATH,
                reason="already_authenticated",
            )

    return PASS


class SessionGatewayMiddleware(BaseHTTPMiddleware):
    """Applies ``evaluate_route`` to every HTTP request"""

    def __init__(
        self,
        app: ASGIApp,
        verifier: Callable[[str], Optional[dict]] = token_codec.verify,
        cookie_name: str = settings.SESSION_COOKIE_NAME,
    ):
        super().__init__(app)
        self.verifier = verifier
        self.cookie_name = cookie_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        token = request.cookies.get(self.cookie_name)
        decision = evaluate_route(path, request.query_params, token, self.verifier)

        if decision.passes:
            return await call_next(request)

        logger.info(f"[Gateway] {path} -> {decision.redirect_to} ({decision.reason})")
        response = RedirectResponse(url=decision.redirect_to, status_code=307)
        if decision.clear_session:
            response.delete_cookie(self.cookie_name, path="/")
        return response
