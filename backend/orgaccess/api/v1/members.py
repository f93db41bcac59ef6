from __future__ import annotations

import uuid
from typing import List

from fastapi import APIRouter, Depends, Response, status

from orgaccess.api.deps.auth import get_current_user
from orgaccess.api.deps.permissions import require_permission
from orgaccess.api.deps.services import get_services
from orgaccess.auth.permissions import PERM
from orgaccess.core.security import AuthenticatedUser
from orgaccess.models.organization import Organization
from orgaccess.schemas.member import MemberOut, MemberRoleOut, MemberRoleUpdate
from orgaccess.services.container import AccessServices

router = APIRouter(prefix="/organizations/{handle}/members", tags=["members"])


@router.get("", response_model=List[MemberOut])
async def list_members(
    org: Organization = Depends(require_permission(PERM.MEMBERS_READ)),
    services: AccessServices = Depends(get_services),
):
    return await services.memberships.list_members(org.org_id)


@router.put("/{user_id}/role", response_model=MemberRoleOut)
async def assign_member_role(
    user_id: uuid.UUID,
    payload: MemberRoleUpdate,
    org: Organization = Depends(require_permission(PERM.ROLES_ASSIGN)),
    operator: AuthenticatedUser = Depends(get_current_user),
    services: AccessServices = Depends(get_services),
):
    member = await services.memberships.assign_role(org.org_id, user_id, payload.role_id, operator.id)
    return MemberRoleOut(user_id=member.user_id, role_id=member.org_role_id)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(
    user_id: uuid.UUID,
    org: Organization = Depends(require_permission(PERM.MEMBERS_REMOVE)),
    operator: AuthenticatedUser = Depends(get_current_user),
    services: AccessServices = Depends(get_services),
):
    await services.memberships.remove_member(org.org_id, user_id, operator.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
