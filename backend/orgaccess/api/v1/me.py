from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from orgaccess.api.deps.auth import get_current_user
from orgaccess.api.deps.services import get_services
from orgaccess.core.security import AuthenticatedUser
from orgaccess.schemas.invitation import MyInvitationOut
from orgaccess.schemas.member import MyMembershipOut
from orgaccess.services.container import AccessServices

router = APIRouter(prefix="/me", tags=["me"])


@router.get("/organizations/memberships", response_model=List[MyMembershipOut])
async def list_my_memberships(
    user: AuthenticatedUser = Depends(get_current_user),
    services: AccessServices = Depends(get_services),
):
    return await services.memberships.list_memberships_for_user(user.id)


@router.get("/invitations", response_model=List[MyInvitationOut])
async def list_my_invitations(
    user: AuthenticatedUser = Depends(get_current_user),
    services: AccessServices = Depends(get_services),
):
    """Pending invitations sent to the caller's email, across organizations."""
    return await services.invitations.list_pending_for_email(user.email)
