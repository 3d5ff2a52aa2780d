# src/token_studio/main.py
"""Main entry point for the Token Studio application."""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from token_studio.api.v1 import metadata_router, networks_router, tokens_router
from token_studio.core.settings import settings
from token_studio.services.assets import get_logo_storage
from token_studio.services.errors import MetadataError
from token_studio.services.ownership import get_owner_resolver
from token_studio.services.session_sweep import SessionSweepWorker

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Token Studio API",
    description="Token metadata drafts, ownership-gated edits and audit history",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(metadata_router, prefix="/api/v1")
app.include_router(tokens_router, prefix="/api/v1")
app.include_router(networks_router, prefix="/api/v1")

# Locally stored logos (fallback when remote pinning is unavailable)
app.mount(
    "/uploads",
    StaticFiles(directory=settings.upload_dir, check_dir=False),
    name="uploads",
)


@app.exception_handler(MetadataError)
async def metadata_error_handler(_request: Request, exc: MetadataError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "kind": exc.kind},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": "Invalid request",
            "kind": "validation",
            "errors": jsonable_encoder(
                [
                    {"loc": error["loc"], "msg": error["msg"], "type": error["type"]}
                    for error in exc.errors()
                ]
            ),
        },
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "kind": "internal"},
    )


@app.on_event("startup")
async def on_startup() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
    if settings.session_sweep_enabled:
        worker = SessionSweepWorker()
        await worker.start()
        app.state.session_sweeper = worker
    else:
        app.state.session_sweeper = None


@app.on_event("shutdown")
async def on_shutdown() -> None:
    worker: SessionSweepWorker | None = getattr(app.state, "session_sweeper", None)
    if worker:
        await worker.stop()
    await get_owner_resolver().close()
    await get_logo_storage().close()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": "Token Studio API",
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("token_studio.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
