"""
FastAPI Application

Main entry point for the climbing readiness web API.
"""

import logging
from typing import Dict

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.routes import metrics, sessions
from src.config import get_settings

settings = get_settings()
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Climbing Readiness API",
    description="Training readiness, load ratio and next-session recommendations for climbers",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS configuration - allow frontend to access API
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(metrics.router, prefix="/api", tags=["Metrics"])
app.include_router(sessions.router, prefix="/api", tags=["Sessions"])


@app.get("/")
async def root() -> Dict[str, str]:
    """Root endpoint - API information."""
    return {
        "name": "Climbing Readiness API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health")
async def health_check() -> Dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": "climb-readiness-api"}


def _error_body(request: Request, error: str, message: str) -> Dict[str, str]:
    return {"error": error, "message": message, "path": request.url.path}


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Rejected metric requests (negative rest, no valid climbs)."""
    detail = str(exc.detail)
    logger.info("%s %s rejected (%d): %s", request.method, request.url.path, exc.status_code, detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, detail, detail),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """
    Request bodies that do not match the request models.

    Individual session and climb records are validated leniently by the
    engine; only the envelope is rejected here.
    """
    errors = exc.errors()
    if errors:
        location = ".".join(str(part) for part in errors[0]["loc"])
        message = f"{location}: {errors[0]['msg']}"
    else:
        message = "Request body does not match the expected schema"
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=_error_body(request, "Invalid request", message),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.exception("Metrics request %s %s failed", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(request, "Internal Server Error", "Metrics computation failed"),
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.api.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=True,
        log_level=settings.LOG_LEVEL.lower(),
    )
