from __future__ import annotations

from fastapi import APIRouter, Depends, status

from orgaccess.api.deps.auth import get_current_user
from orgaccess.api.deps.organization import get_current_organization
from orgaccess.api.deps.services import get_services
from orgaccess.core.security import AuthenticatedUser
from orgaccess.models.organization import Organization
from orgaccess.schemas.organization import OrganizationCreate, OrganizationOut
from orgaccess.schemas.permission import MemberPermissionsOut
from orgaccess.services.container import AccessServices

router = APIRouter(prefix="/organizations", tags=["organizations"])


@router.post("", response_model=OrganizationOut, status_code=status.HTTP_201_CREATED)
async def create_organization(
    payload: OrganizationCreate,
    user: AuthenticatedUser = Depends(get_current_user),
    services: AccessServices = Depends(get_services),
):
    """
    Create an organization. The caller becomes its Owner.
    """
    return await services.organizations.create_organization(payload.org_handle, payload.org_name, user)


@router.get("/{handle}/member-permissions", response_model=MemberPermissionsOut)
async def my_permissions(
    org: Organization = Depends(get_current_organization),
    user: AuthenticatedUser = Depends(get_current_user),
    services: AccessServices = Depends(get_services),
):
    """
    The caller's effective permissions in this organization (empty for non-members).
    """
    granted = await services.checker.list_permissions(user.id, org.org_id)
    return MemberPermissionsOut(permissions=sorted(granted))
