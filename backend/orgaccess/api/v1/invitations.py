from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status

from orgaccess.api.deps.auth import get_current_user
from orgaccess.api.deps.permissions import require_permission
from orgaccess.api.deps.services import get_services
from orgaccess.auth.permissions import PERM
from orgaccess.core.security import AuthenticatedUser
from orgaccess.models.organization import Organization
from orgaccess.schemas.invitation import (
    InvitationAccepted,
    InvitationCreate,
    InvitationDeclined,
    InvitationIssued,
    InvitationOut,
    InvitationTokenIn,
)
from orgaccess.services.container import AccessServices

router = APIRouter(tags=["invitations"])


# =========================================================
# CREATE + LIST (organization-scoped)
# =========================================================
@router.post(
    "/organizations/{handle}/invitations",
    response_model=InvitationIssued,
    status_code=status.HTTP_201_CREATED,
)
async def issue_invitation(
    payload: InvitationCreate,
    org: Organization = Depends(require_permission(PERM.MEMBERS_INVITE)),
    inviter: AuthenticatedUser = Depends(get_current_user),
    services: AccessServices = Depends(get_services),
):
    """
    Create a pending invitation. The token is only ever returned here;
    delivering it to the invitee is up to the caller.
    """
    return await services.invitations.issue_invitation(org.org_id, inviter.id, str(payload.email), payload.role_id)


@router.get("/organizations/{handle}/invitations", response_model=List[InvitationOut])
async def list_invitations(
    org: Organization = Depends(require_permission(PERM.MEMBERS_READ)),
    services: AccessServices = Depends(get_services),
):
    return await services.invitations.list_invitations(org.org_id)


# =========================================================
# ACCEPT / DECLINE (any authenticated invitee)
# =========================================================
@router.post("/invitations/accept", response_model=InvitationAccepted)
async def accept_invitation(
    payload: InvitationTokenIn,
    user: AuthenticatedUser = Depends(get_current_user),
    services: AccessServices = Depends(get_services),
):
    result = await services.invitations.accept_invitation(
        payload.token,
        user.id,
        user.email,
        user.display_name,
    )
    return InvitationAccepted(
        org_id=result.org_id,
        organization_handle=result.organization_handle,
        role_assigned_id=result.role_assigned_id,
        already_member=result.already_member,
    )


@router.post("/invitations/decline", response_model=InvitationDeclined)
async def decline_invitation(
    payload: InvitationTokenIn,
    user: AuthenticatedUser = Depends(get_current_user),
    services: AccessServices = Depends(get_services),
):
    invitation = await services.invitations.decline_invitation(payload.token, user.email)
    return InvitationDeclined(invitation_id=invitation.invitation_id, status=invitation.status)
