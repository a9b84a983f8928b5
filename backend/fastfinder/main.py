from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from slowapi.errors import RateLimitExceeded

from fastfinder.core.config import settings
from fastfinder.core.database import init_db, close_db
from fastfinder.core.exceptions import FinderError, error_response
from fastfinder.core.logging_config import logger
from fastfinder.core.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from fastfinder.core.rate_limiter import limiter, rate_limit_exceeded_handler
from fastfinder.api.router import api_router
from fastfinder.middleware.session_gateway import SessionGatewayMiddleware

APP_VERSION = "1.0.0"
PLACEHOLDER_SECRETS = {"", "CHANGE_ME", "your-secret-key", "changeme"}


def validate_critical_config():
    """Validate critical configuration at startup - fail fast if missing"""
    errors = []
    warnings = []

    if not settings.DATABASE_URL:
        errors.append("DATABASE_URL is not set")

    if settings.JWT_SECRET in PLACEHOLDER_SECRETS:
        errors.append("JWT_SECRET is not set or using a placeholder value")
    elif settings.is_production and len(settings.JWT_SECRET) < 32:
        warnings.append("JWT_SECRET is shorter than 32 characters")

    if not settings.email_configured:
        warnings.append("EMAIL_USER/EMAIL_PASS not set - verification emails will not be delivered")

    if settings.is_production and settings.EXPOSE_CODES_IN_RESPONSE:
        warnings.append("EXPOSE_CODES_IN_RESPONSE is on in production - one-time codes are returned to callers")

    if errors:
        for err in errors:
            logger.critical(f"[Startup] CRITICAL: {err}")
        raise RuntimeError(f"Missing critical configuration: {', '.join(errors)}")

    for warn in warnings:
        logger.warning(f"[Startup] WARNING: {warn}")

    logger.info("[Startup] ✓ Critical configuration validated")
    return True


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME} ({settings.ENVIRONMENT})...")
    validate_critical_config()

    await init_db()
    logger.info("[Startup] ✓ Database tables ready")

    yield

    logger.info(f"Shutting down {settings.APP_NAME}...")
    await close_db()


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Campus lost-and-found: report, search and reclaim lost items",
    version=APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add rate limiter state and exception handler
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Add middleware (order matters - last added runs first)
# 1. Route guard for page navigations (innermost, sees the final path)
app.add_middleware(SessionGatewayMiddleware)

# 2. Security headers
app.add_middleware(SecurityHeadersMiddleware)

# 3. Request logging (wraps everything above, including gateway redirects)
app.add_middleware(RequestLoggingMiddleware)

# 4. CORS - Origins from CORS_ORIGINS_STR in .env
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Response-Time"],
)

app.include_router(api_router, prefix=settings.API_PREFIX)


# Exception handlers
@app.exception_handler(FinderError)
async def finder_exception_handler(request: Request, exc: FinderError):
    return JSONResponse(status_code=exc.status_code, content=error_response(exc))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies and bad enum/type values become a 400 envelope"""
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        if first.get("type") == "json_invalid":
            message = "Invalid request body"
        else:
            field = ".".join(str(part) for part in first.get("loc", ())[1:]) or "body"
            message = f"Invalid value for {field}: {first.get('msg')}"

    logger.warning(f"[Validation] {request.method} {request.url.path}: {message}")
    return JSONResponse(status_code=400, content={"success": False, "error": message})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.log_error_with_context(exc, context=f"{request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": str(exc) if settings.DEBUG and not settings.is_production else "An error occurred",
        }
    )


# Health check endpoint
@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "app_name": settings.APP_NAME,
        "version": APP_VERSION,
        "environment": settings.ENVIRONMENT
    }


@app.get("/", tags=["Health"])
async def root():
    return {
        "name": settings.APP_NAME,
        "version": APP_VERSION,
        "docs": "/docs",
        "api": settings.API_PREFIX,
    }


def run():
    """Console entry point"""
    import uvicorn

    uvicorn.run(
        "fastfinder.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG and not settings.is_production,
    )


if __name__ == "__main__":
    run()
