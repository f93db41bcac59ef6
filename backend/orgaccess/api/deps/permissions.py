from __future__ import annotations

from typing import Callable

from fastapi import Depends

from orgaccess.api.deps.auth import get_current_user
from orgaccess.api.deps.organization import get_current_organization
from orgaccess.api.deps.services import get_services
from orgaccess.auth.permissions import PERMISSION_DESCRIPTIONS
from orgaccess.core.errors import ForbiddenError
from orgaccess.core.security import AuthenticatedUser
from orgaccess.models.organization import Organization
from orgaccess.services.container import AccessServices


def require_permission(permission_id: str) -> Callable:
    """
    Gate a route on one catalog permission in the URL's organization.

    Non-members are refused exactly like members lacking the permission.
    Returns the resolved organization so routes don't resolve it twice.
    """
    if permission_id not in PERMISSION_DESCRIPTIONS:
        raise ValueError(f"Unknown permission: {permission_id!r}")

    async def _checker(
        org: Organization = Depends(get_current_organization),
        user: AuthenticatedUser = Depends(get_current_user),
        services: AccessServices = Depends(get_services),
    ) -> Organization:
        allowed = await services.checker.has_permission(user.id, org.org_id, permission_id)
        if not allowed:
            raise ForbiddenError(
                "You do not have permission to perform this action.",
                context={"required": permission_id},
            )
        return org

    return _checker
