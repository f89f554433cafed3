"""Dashboard statistics route."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from eduxchange.api.dependencies import get_current_user
from eduxchange.api.schemas.resources import DashboardResponse
from eduxchange.services.auth import CurrentUser
from eduxchange.services.resources import get_dashboard_stats

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardResponse)
def get_dashboard(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> DashboardResponse:
    """Return resource totals and the five most recent uploads."""
    stats = get_dashboard_stats(current_user["id"])
    if stats is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load dashboard",
        )
    return DashboardResponse(**stats)
