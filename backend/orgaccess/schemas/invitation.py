from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from orgaccess.core.invitation_status import InvitationStatus


class InvitationCreate(BaseModel):
    email: EmailStr
    role_id: UUID


class InvitationOut(BaseModel):
    invitation_id: UUID
    org_id: UUID
    invited_email: str
    invited_by_user_id: UUID
    role_to_assign_id: UUID
    status: InvitationStatus
    expires_at: datetime
    accepted_by_user_id: Optional[UUID] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class InvitationIssued(InvitationOut):
    # Returned once, to the issuer, for out-of-band delivery
    token: str


class InvitationTokenIn(BaseModel):
    token: str = Field(..., min_length=1, description="Invitation token")


class InvitationAccepted(BaseModel):
    org_id: UUID
    organization_handle: str
    role_assigned_id: UUID
    already_member: bool = False


class InvitationDeclined(BaseModel):
    invitation_id: UUID
    status: InvitationStatus


class MyInvitationOut(BaseModel):
    """A pending invitation addressed to the caller, with the inviting org."""

    invitation_id: UUID
    invited_email: str
    status: InvitationStatus
    expires_at: datetime
    created_at: datetime
    org_id: UUID
    org_name: str
    org_handle: str

    model_config = {"from_attributes": True}
