"""Bearer token verification and permission guards."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import jwt
from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..config import settings
from ..errors import ForbiddenError, TokenExpiredError, UnauthorizedError
from ..permissions import GLOBAL_BRANCH_ROLES, has_permission

security = HTTPBearer(auto_error=False)


@dataclass(slots=True)
class CurrentUser:
    user_id: str
    tenant_id: str
    role: str
    branch_ids: list[str] = field(default_factory=list)

    def can_access_branch(self, branch_id: Optional[str]) -> bool:
        if branch_id is None or self.role in GLOBAL_BRANCH_ROLES:
            return True
        return branch_id.lower() in {branch.lower() for branch in self.branch_ids}


def decode_token(token: str) -> dict[str, Any]:
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError as exc:
        raise TokenExpiredError("Your session has expired. Please login again.") from exc
    except jwt.InvalidTokenError as exc:
        raise UnauthorizedError("Invalid authentication token") from exc


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> CurrentUser:
    """Resolve the caller from the ``Authorization: Bearer`` header."""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("You must be logged in to access this resource")

    payload = decode_token(credentials.credentials)
    user_id = payload.get("sub")
    tenant_id = payload.get("tenantId")
    role = payload.get("role")
    if not user_id or not tenant_id or not role:
        raise UnauthorizedError("Invalid authentication token")

    return CurrentUser(
        user_id=str(user_id),
        tenant_id=str(tenant_id),
        role=str(role),
        branch_ids=[str(branch) for branch in payload.get("branchIds") or []],
    )


def require_any_permission(*permissions: str) -> Callable[..., CurrentUser]:
    """Dependency factory: the caller's role must grant at least one of ``permissions``."""

    def dependency(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if not any(has_permission(current_user.role, permission) for permission in permissions):
            raise ForbiddenError(f"Insufficient permissions: one of [{', '.join(permissions)}] required")
        return current_user

    return dependency


def require_permission(permission: str) -> Callable[..., CurrentUser]:
    return require_any_permission(permission)


def require_branch_access(
    current_user: CurrentUser = Depends(get_current_user),
    branch_id: Optional[str] = Query(default=None, alias="branchId", include_in_schema=False),
) -> CurrentUser:
    """Callers outside the global roles only see branches they are assigned to."""
    if not current_user.can_access_branch(branch_id):
        raise ForbiddenError("No access to this branch")
    return current_user
