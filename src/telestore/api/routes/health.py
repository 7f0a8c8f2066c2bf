"""Health check endpoints."""

from typing import Any

from fastapi import APIRouter

from telestore.core.errors import InitializationError
from telestore.core.fs import get_filesystem

router = APIRouter()


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """
    Report whether the filesystem is connected.

    Returns:
        dict with status and index details
    """
    try:
        fs = get_filesystem()
    except InitializationError as exc:
        return {"status": "unavailable", "message": str(exc)}

    return {
        "status": "healthy",
        "name": fs.name,
        "root": fs.root,
        "entries": len(fs.index),
    }


@router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    """
    Kubernetes-style liveness probe.

    Returns:
        Simple OK response if the service is running
    """
    return {"status": "ok"}
