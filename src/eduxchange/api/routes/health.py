"""Liveness route."""

from __future__ import annotations

from fastapi import APIRouter

from eduxchange.config import get_storage_backend

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check() -> dict[str, str]:
    """Report that the service is up and which object store it writes to."""
    return {"status": "healthy", "storage_backend": get_storage_backend()}
