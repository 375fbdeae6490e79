import logging
from urllib.parse import urlparse

from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.api import friends, intakes, settings as settings_api
from app.config import settings
from app.services.errors import HydrationError

logger = logging.getLogger(__name__)

app = FastAPI(title="HydroBuddy", version="0.1.0")


# =============================================================================
# CSRF Origin Validation Middleware
# =============================================================================


class CSRFOriginMiddleware(BaseHTTPMiddleware):
    """
    Validate Origin/Referer headers on state-changing requests to prevent CSRF.

    - POST, PUT, PATCH, DELETE must include a matching Origin or Referer header
    - GET, HEAD, OPTIONS are always allowed (safe methods)
    - Health check endpoints are exempt
    """

    SAFE_METHODS = {"GET", "HEAD", "OPTIONS"}
    EXEMPT_PATHS = {"/health"}

    async def dispatch(self, request: Request, call_next):
        if request.method in self.SAFE_METHODS:
            return await call_next(request)

        if request.url.path in self.EXEMPT_PATHS:
            return await call_next(request)

        expected_host = request.headers.get("host", "")

        # Origin first, then Referer
        for header in ("origin", "referer"):
            value = request.headers.get(header)
            if not value:
                continue
            if urlparse(value).netloc != expected_host:
                logger.warning(
                    "CSRF %s mismatch: %s=%s, expected=%s, path=%s",
                    header,
                    header,
                    value,
                    expected_host,
                    request.url.path,
                )
                return JSONResponse(
                    status_code=403,
                    content={"detail": "Origin validation failed"},
                )
            return await call_next(request)

        logger.warning(
            "CSRF missing origin/referer: method=%s, path=%s",
            request.method,
            request.url.path,
        )
        return JSONResponse(
            status_code=403,
            content={"detail": "Origin validation failed"},
        )


app.add_middleware(CSRFOriginMiddleware)

# Serve stored photos and avatars
app.mount(
    "/uploads",
    StaticFiles(directory=settings.upload_dir, check_dir=False),
    name="uploads",
)


@app.exception_handler(HydrationError)
async def hydration_error_handler(request: Request, exc: HydrationError):
    """Map domain errors raised by services to JSON error responses."""
    logger.info(
        "%s on %s %s: %s",
        type(exc).__name__,
        request.method,
        request.url.path,
        exc.detail,
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


# Include routers
app.include_router(friends.router)
app.include_router(intakes.router)
app.include_router(settings_api.router)


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
