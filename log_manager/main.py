"""Log Manager - read API and storage configuration service."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from log_manager.api import api_router
from log_manager.config import settings
from log_manager.database import close_db, init_db
from log_manager.logging_config import setup_logging

# Configure logging early
setup_logging(debug=settings.debug, json_logs=not settings.debug)

logger = logging.getLogger(__name__)

VERSION = "1.10.3"


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service status")
    version: str = Field(description="Application version")
    storage_type: str = Field(description="Active audit storage backend")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # === STARTUP ===
    logger.info(f"{settings.app_name} starting up...")

    await init_db()
    logger.info(f"Audit storage: {settings.storage_type.value}")

    yield

    # === SHUTDOWN ===
    try:
        await close_db()
        logger.info("Database connections closed")
    except Exception as e:
        logger.error(f"Error closing database: {e}")

    logger.info(f"{settings.app_name} shutdown complete")


tags_metadata = [
    {
        "name": "audit",
        "description": "Browse stored audit entries",
    },
    {
        "name": "config",
        "description": "Audit storage backend selection",
    },
]

app = FastAPI(
    title=settings.app_name,
    version=VERSION,
    description="Audit trail for content, taxonomy, media and user session events.",
    lifespan=lifespan,
    openapi_tags=tags_metadata,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests with timing information."""
    start_time = time.time()

    response = await call_next(request)

    duration_ms = (time.time() - start_time) * 1000

    path = request.url.path
    if path != "/health":
        logger.info(
            "http_request",
            extra={
                "method": request.method,
                "path": path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
                "client_ip": request.client.host if request.client else "unknown",
            },
        )

    return response


app.include_router(api_router)


@app.get("/health", response_model=HealthResponse, tags=["health"])
async def health() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        status="ok",
        version=VERSION,
        storage_type=settings.storage_type.value,
    )


def main():
    """Run the application."""
    import uvicorn

    uvicorn.run(
        "log_manager.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
