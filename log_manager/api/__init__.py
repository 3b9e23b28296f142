"""API routes for Log Manager."""

from fastapi import APIRouter

from log_manager.api.audit import router as audit_router
from log_manager.api.config import router as config_router

api_router = APIRouter(prefix="/api")
api_router.include_router(audit_router, tags=["audit"])
api_router.include_router(config_router, tags=["config"])

__all__ = ["api_router"]
