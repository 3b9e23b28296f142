"""Storage configuration endpoints."""

from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, ValidationError

from log_manager.audit.sinks import FileSink
from log_manager.config import get_config_dict, update_config

router = APIRouter(prefix="/config")


class ConfigUpdate(BaseModel):
    """Config update request."""

    storage_type: str | None = None  # "database", "file" or the legacy "textfile"
    file_path: str | None = None  # Directory for log-manager.txt
    message_preview_length: int | None = None


@router.get("")
async def get_config() -> dict[str, Any]:
    """Get current configuration."""
    config = get_config_dict()
    log_file = FileSink().log_file()
    config["log_file"] = str(log_file) if log_file else None
    return config


@router.put("")
async def set_config(update: ConfigUpdate) -> dict[str, Any]:
    """Update configuration. Applies to the next audit write."""
    updates = update.model_dump(exclude_none=True)
    try:
        update_config(updates)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return await get_config()
