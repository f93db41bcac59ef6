from __future__ import annotations

import uuid
from typing import List

from fastapi import APIRouter, Depends, Response, status

from orgaccess.api.deps.permissions import require_permission
from orgaccess.api.deps.services import get_services
from orgaccess.auth.permissions import PERM
from orgaccess.models.organization import Organization
from orgaccess.schemas.role import RoleCreate, RoleOut, RoleUpdate
from orgaccess.services.container import AccessServices

router = APIRouter(prefix="/organizations/{handle}/roles", tags=["roles"])


@router.get("", response_model=List[RoleOut])
async def list_roles(
    org: Organization = Depends(require_permission(PERM.MEMBERS_READ)),
    services: AccessServices = Depends(get_services),
):
    return await services.roles.list_roles(org.org_id)


@router.post("", response_model=RoleOut, status_code=status.HTTP_201_CREATED)
async def create_role(
    payload: RoleCreate,
    org: Organization = Depends(require_permission(PERM.ROLES_CREATE)),
    services: AccessServices = Depends(get_services),
):
    return await services.roles.create_role(org.org_id, payload.role_name, payload.permission_ids)


@router.put("/{role_id}", response_model=RoleOut)
async def update_role(
    role_id: uuid.UUID,
    payload: RoleUpdate,
    org: Organization = Depends(require_permission(PERM.ROLES_EDIT)),
    services: AccessServices = Depends(get_services),
):
    """
    Rename a custom role and/or replace its permission set.
    System roles can have their permissions edited but not their names.
    """
    return await services.roles.update_role(
        org.org_id,
        role_id,
        name=payload.role_name,
        permission_ids=payload.permission_ids,
    )


@router.delete("/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_role(
    role_id: uuid.UUID,
    org: Organization = Depends(require_permission(PERM.ROLES_DELETE)),
    services: AccessServices = Depends(get_services),
):
    await services.roles.delete_role(org.org_id, role_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
