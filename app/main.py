"""
Main FastAPI application for the website section generator backend.
Handles CORS, request logging middleware, lifespan events, error envelopes
and router registration.
"""
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.database import close_db, init_db
from app.exceptions import ProjectError
from app.routers import health, projects

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Startup / shutdown helpers
# ---------------------------------------------------------------------------

async def _check_database() -> bool:
    """Initialise DB tables and verify the connection.  Returns True on success."""
    if settings.STORE_BACKEND == "memory":
        logger.info("✓ In-memory store selected; database not used")
        return True
    try:
        await init_db()
        logger.info("✓ Database connection OK")
        return True
    except Exception as exc:
        logger.error("✗ Database connection failed: %s", exc)
        raise


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown event handler."""
    logger.info("=" * 60)
    logger.info("  Starting website generator backend …")
    logger.info("=" * 60)

    await _check_database()

    logger.info("  Backend ready on http://%s:%d", settings.HOST, settings.PORT)
    logger.info("  Allowed origins: %s", settings.get_allowed_origins())
    logger.info("=" * 60)

    yield  # ← server is running

    logger.info("Shutting down website generator backend …")
    await close_db()
    logger.info("✓ Shutdown complete.")


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Website Generator API",
    description=(
        "Stores short website ideas and derives a list of page sections "
        "for each one.\n\n"
        "Key endpoints:\n"
        "- `POST /api/projects` — store an idea, get its sections\n"
        "- `GET  /api/projects` — list stored projects, newest first\n"
        "- `GET  /api/projects/{id}` — fetch one project\n"
    ),
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)


# ---------------------------------------------------------------------------
# Error envelopes
#
# Failures never escape as HTTP errors: every one becomes
# {"success": false, "error": "..."} with status 200.
# ---------------------------------------------------------------------------

def _error_envelope(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={"success": False, "error": message},
    )


@app.exception_handler(ProjectError)
async def project_error_handler(request: Request, exc: ProjectError):
    logger.warning(
        "%s on %s %s: %s",
        type(exc).__name__,
        request.method,
        request.url.path,
        exc.message,
    )
    return _error_envelope(exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Convert malformed request bodies into the error envelope."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request"
    logger.warning("Validation error on %s %s: %s", request.method, request.url.path, message)
    return _error_envelope(message)


# ---------------------------------------------------------------------------
# Request / response logging middleware
# ---------------------------------------------------------------------------

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Log every request with method, path, status code, and elapsed time.
    Attaches an ``X-Process-Time`` header (milliseconds) to every response.

    Unhandled exceptions are logged with their traceback and answered with
    the error envelope here, inside CORS, so browsers can still read them.
    """
    t0 = time.monotonic()
    try:
        response = await call_next(request)
    except Exception as exc:
        logger.error(
            "Unhandled exception on %s %s: %s",
            request.method,
            request.url.path,
            exc,
            exc_info=True,
        )
        response = _error_envelope(str(exc) or "An unknown error occurred")
    elapsed_ms = round((time.monotonic() - t0) * 1000, 2)

    # Skip noisy health-check polling
    if request.url.path not in ("/api/health/", "/"):
        logger.info(
            "%s %s → %d  (%.2f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )

    response.headers["X-Process-Time"] = f"{elapsed_ms}ms"
    return response


# ---------------------------------------------------------------------------
# CORS
#
# Added last so it wraps the logging middleware and every envelope it returns.
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

app.include_router(health.router,   prefix="/api/health",   tags=["Health"])
app.include_router(projects.router, prefix="/api/projects", tags=["Projects"])


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------

@app.get("/", tags=["Root"], include_in_schema=False)
async def root():
    """API root — returns basic service info."""
    return {
        "name": "Website Generator API",
        "version": "0.1.0",
        "description": "Website idea → page sections",
        "docs": "/docs",
        "health": "/api/health",
        "endpoints": {
            "projects": "/api/projects",
        },
    }


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def run() -> None:
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level="info",
    )


if __name__ == "__main__":
    run()
