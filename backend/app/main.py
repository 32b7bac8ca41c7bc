"""Tradeline Backend API - FastAPI application."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from tradeline import MarketplaceError, __version__

from .config import get_settings
from .logging_config import configure_logging, get_logger
from .rate_limit import limiter
from .routes import (
    ai_router,
    jobs_router,
    messages_router,
    profiles_router,
    quotes_router,
    reviews_router,
    trades_router,
)

logger = get_logger("tradeline.api")

STATUS_BY_KIND = {
    "validation": status.HTTP_400_BAD_REQUEST,
    "not_found": status.HTTP_404_NOT_FOUND,
    "conflict": status.HTTP_409_CONFLICT,
    "unauthorized": status.HTTP_403_FORBIDDEN,
    "upstream": status.HTTP_502_BAD_GATEWAY,
}

KIND_BY_STATUS = {
    status.HTTP_400_BAD_REQUEST: "validation",
    status.HTTP_401_UNAUTHORIZED: "unauthenticated",
    status.HTTP_403_FORBIDDEN: "unauthorized",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
    status.HTTP_409_CONFLICT: "conflict",
}


def error_response(status_code: int, kind: str, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"kind": kind, "message": message}},
        headers=headers,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info(
        f"Starting Tradeline API (debug={settings.debug}, storage={settings.storage_backend}, "
        f"classifier={settings.classifier_strategy})"
    )
    yield
    logger.info("Shutting down Tradeline API")


app = FastAPI(
    title="Tradeline API",
    description="Job matching and workflow API for a trades marketplace",
    version=__version__,
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(MarketplaceError)
async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    status_code = STATUS_BY_KIND.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} | {exc.kind}: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} | {status_code} {exc.kind}: {exc.message}")
    return error_response(status_code, exc.kind, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    if location:
        message = f"{location}: {message}"
    return error_response(status.HTTP_400_BAD_REQUEST, "validation", message)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    kind = KIND_BY_STATUS.get(exc.status_code, "error")
    return error_response(exc.status_code, kind, str(exc.detail), headers=exc.headers)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "internal", "Internal server error"
    )


# CORS middleware
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(jobs_router)
app.include_router(quotes_router)
app.include_router(messages_router)
app.include_router(reviews_router)
app.include_router(profiles_router)
app.include_router(trades_router)
app.include_router(ai_router)


@app.get("/")
async def root():
    return {
        "service": "tradeline-backend",
        "version": __version__,
        "status": "ok",
    }


@app.get("/health")
def health():
    """Health check with an actual storage round trip."""
    from .database import get_supabase_client

    settings = get_settings()
    if settings.storage_backend == "memory":
        return {"status": "healthy", "database": "memory"}

    db_status = "disconnected"
    try:
        db = get_supabase_client(settings)
        db.table("jobs").select("id").limit(1).execute()
        db_status = "connected"
    except Exception as e:
        logger.warning(f"Health check database probe failed: {e}")
        db_status = f"error: {str(e)[:50]}"

    overall_status = "healthy" if db_status == "connected" else "degraded"
    return {
        "status": overall_status,
        "database": db_status,
    }
