import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from .platform.brand import BRAND_APP_DESCRIPTION, BRAND_NAME
from .platform.config import settings
from .platform.database import engine
from .platform.errors import DomainError
from .platform.logging import setup_logging
from .platform.middleware import RateLimitMiddleware, RequestLoggingMiddleware, SecurityHeadersMiddleware
from .platform.request_context import get_request_id

logger = setup_logging()
error_logger = logging.getLogger("introbridge.errors")

# fastapi-users error codes rewritten for the frontend
_FRIENDLY_ERRORS = {
    "REGISTER_USER_ALREADY_EXISTS": "An account with this email already exists. Sign in instead or use a different email.",
    "LOGIN_BAD_CREDENTIALS": "Incorrect email or password.",
}

_INSECURE_SECRET_KEYS = {"dev-secret-key-change-in-production", "changeme", "secret", ""}
IS_PRODUCTION = bool(settings.SENTRY_DSN) or "localhost" not in settings.FRONTEND_URL

if IS_PRODUCTION and settings.SECRET_KEY in _INSECURE_SECRET_KEYS:
    raise RuntimeError(
        "CRITICAL: SECRET_KEY is set to an insecure default. "
        "Set a strong SECRET_KEY in your .env before running in production."
    )

if settings.SENTRY_DSN and settings.SENTRY_DSN.startswith("https://"):
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.DEPLOYMENT_ENV,
        traces_sample_rate=0.1,
        integrations=[FastApiIntegration(), SqlalchemyIntegration()],
    )


@asynccontextmanager
async def lifespan(_app: FastAPI):
    logger.info(
        "%s API started | env=%s celery=%s",
        BRAND_NAME,
        settings.DEPLOYMENT_ENV,
        "off" if settings.DISABLE_CELERY else "on",
    )
    yield


app = FastAPI(
    title=f"{BRAND_NAME} API",
    description=BRAND_APP_DESCRIPTION,
    version="1.0.0",
    # Interactive docs only outside production
    docs_url=None if IS_PRODUCTION else "/api/docs",
    openapi_url=None if IS_PRODUCTION else "/api/openapi.json",
    lifespan=lifespan,
)


# ---------------------------------------------------------------------------
# Error rendering: every failure leaves as {"detail": {"code": ..., ...}}
# ---------------------------------------------------------------------------
def _field_errors(errors: list) -> list[dict]:
    fields = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "header")]
        fields.append({"field": ".".join(loc) or "body", "message": str(err.get("msg", "Invalid value"))})
    return fields


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    if exc.status_code in (401, 402, 403):
        error_logger.warning(
            "%s on %s %s: %s",
            exc.code,
            request.method,
            request.url.path,
            exc.message,
            extra={"error_code": exc.code},
        )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_detail()})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    fields = _field_errors(exc.errors())
    logging.getLogger("introbridge.validation").warning(
        "Validation error on %s %s: %s", request.method, request.url.path, fields
    )
    return JSONResponse(
        status_code=400,
        content={"detail": {"code": "ValidationError", "message": "Invalid request data", "fields": fields}},
    )


@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException):
    if exc.status_code == 401:
        detail = {"code": "Unauthorized", "message": "Authentication required"}
    elif isinstance(exc.detail, str):
        detail = _FRIENDLY_ERRORS.get(exc.detail, exc.detail)
    else:
        detail = exc.detail
    return JSONResponse(status_code=exc.status_code, content={"detail": detail}, headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    request_id = getattr(request.state, "request_id", None) or get_request_id()
    error_logger.exception(
        "Unhandled error on %s %s",
        request.method,
        request.url.path,
        extra={"request_id": request_id, "error_code": "Internal"},
    )
    return JSONResponse(
        status_code=500,
        content={"detail": {"code": "Internal", "message": "Internal server error", "request_id": request_id}},
    )


# ---------------------------------------------------------------------------
# Middleware (last added runs first)
# ---------------------------------------------------------------------------
def _cors_origins() -> list[str]:
    origins = [settings.FRONTEND_URL, "http://localhost:5173", "http://localhost:3000"]
    if settings.CORS_EXTRA_ORIGINS:
        origins.extend(o.strip() for o in settings.CORS_EXTRA_ORIGINS.split(","))
    return [o for o in origins if o]


app.add_middleware(SecurityHeadersMiddleware, hsts=IS_PRODUCTION)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_origin_regex=settings.CORS_ALLOW_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Acting-As", "X-Request-ID", "X-Requested-With"],
)
app.add_middleware(RateLimitMiddleware)
app.add_middleware(RequestLoggingMiddleware)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from .api.v1 import candidates, introductions, job_roles, notifications, organizations, privacy  # noqa: E402
from .api.v1.users_fastapi import UserCreate, UserRead, UserUpdate, auth_backend, fastapi_users  # noqa: E402

app.include_router(fastapi_users.get_auth_router(auth_backend), prefix="/api/v1/auth/jwt", tags=["auth"])
app.include_router(fastapi_users.get_register_router(UserRead, UserCreate), prefix="/api/v1/auth", tags=["auth"])
app.include_router(fastapi_users.get_reset_password_router(), prefix="/api/v1/auth", tags=["auth"])
app.include_router(fastapi_users.get_verify_router(UserRead), prefix="/api/v1/auth", tags=["auth"])
app.include_router(fastapi_users.get_users_router(UserRead, UserUpdate), prefix="/api/v1/users", tags=["users"])

for _router in (
    introductions.router,
    job_roles.router,
    candidates.router,
    privacy.router,
    organizations.router,
    organizations.admin_router,
    notifications.router,
):
    app.include_router(_router, prefix="/api/v1")


def _database_reachable() -> bool:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        logger.warning("Health check: database unreachable")
        return False


def _redis_reachable() -> bool:
    try:
        import redis

        client = redis.from_url(settings.REDIS_URL, socket_connect_timeout=2, socket_timeout=2)
        return bool(client.ping())
    except Exception:
        return False


@app.get("/health")
def health_check():
    database = _database_reachable()
    redis_ok = _redis_reachable()
    return {
        "status": "healthy" if database and redis_ok else "degraded",
        "service": "introbridge-api",
        "database": database,
        "redis": redis_ok,
        "celery_enabled": not settings.DISABLE_CELERY,
    }
