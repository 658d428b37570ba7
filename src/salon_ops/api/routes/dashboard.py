"""Command Center and Owner Dashboard endpoints."""

from __future__ import annotations

from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from fastapi.exceptions import RequestValidationError

from ...data.dashboard_repository import DashboardStore, get_dashboard_store
from ...errors import ForbiddenError
from ...permissions import APPOINTMENTS_READ, REPORTS_READ, REPORTS_READ_BRANCH, has_permission
from ...schemas.dashboard import CommandCenterEnvelope, ErrorEnvelope, OwnerDashboardEnvelope
from ...services.dashboard import get_command_center, get_owner_dashboard
from ..responses import success_response
from ..security import CurrentUser, require_any_permission, require_branch_access, require_permission

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"

_ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorEnvelope},
    status.HTTP_401_UNAUTHORIZED: {"model": ErrorEnvelope},
    status.HTTP_403_FORBIDDEN: {"model": ErrorEnvelope},
    status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorEnvelope},
}


@router.get(
    "/command-center",
    response_model=CommandCenterEnvelope,
    responses=_ERROR_RESPONSES,
    summary="Get Command Center data",
)
async def get_command_center_view(
    branch_id: UUID = Query(..., alias="branchId", description="Branch to report on"),
    target_date: Optional[str] = Query(
        default=None,
        alias="date",
        pattern=DATE_PATTERN,
        description="Day to report on (YYYY-MM-DD); defaults to today",
    ),
    current_user: CurrentUser = Depends(require_permission(APPOINTMENTS_READ)),
    _branch_user: CurrentUser = Depends(require_branch_access),
    store: DashboardStore = Depends(get_dashboard_store),
) -> dict:
    """Stats, stations, next-up queue, attention items and timeline in one round-trip."""
    day = _parse_day(target_date)
    data = await get_command_center(store, current_user.tenant_id, str(branch_id), day)
    return success_response(data)


@router.get(
    "/owner",
    response_model=OwnerDashboardEnvelope,
    responses=_ERROR_RESPONSES,
    summary="Get Owner Dashboard data",
)
async def get_owner_view(
    branch_id: Optional[UUID] = Query(
        default=None, alias="branchId", description="Optional branch filter; tenant-wide when omitted"
    ),
    current_user: CurrentUser = Depends(require_any_permission(REPORTS_READ, REPORTS_READ_BRANCH)),
    _branch_user: CurrentUser = Depends(require_branch_access),
    store: DashboardStore = Depends(get_dashboard_store),
) -> dict:
    """Revenue, appointment, inventory and staff summary for the tenant or one branch."""
    if branch_id is None and not has_permission(current_user.role, REPORTS_READ):
        raise ForbiddenError(f"Insufficient permissions: {REPORTS_READ} required for tenant-wide reports")
    data = await get_owner_dashboard(store, current_user.tenant_id, str(branch_id) if branch_id else None)
    return success_response(data)


def _parse_day(value: Optional[str]) -> Optional[date]:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise RequestValidationError(
            [{"type": "value_error", "loc": ("query", "date"), "msg": "Invalid calendar date", "input": value}]
        ) from exc
