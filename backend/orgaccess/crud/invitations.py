# orgaccess/crud/invitations.py
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgaccess.core.invitation_status import InvitationStatus
from orgaccess.models.invitation import Invitation
from orgaccess.models.organization import Organization


class InvitationRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, invitation_id: uuid.UUID) -> Optional[Invitation]:
        return await self.db.get(Invitation, invitation_id)

    async def get_by_token(self, token: str, *, for_update: bool = False) -> Optional[Invitation]:
        stmt = select(Invitation).where(Invitation.token == token)
        if for_update:
            # Row lock on Postgres; SQLite ignores it
            stmt = stmt.with_for_update()
        return (await self.db.execute(stmt)).scalar_one_or_none()

    async def get_pending(self, org_id: uuid.UUID, email: str) -> Optional[Invitation]:
        stmt = (
            select(Invitation)
            .where(Invitation.org_id == org_id)
            .where(Invitation.invited_email == email)
            .where(Invitation.status == InvitationStatus.PENDING)
            .limit(1)
        )
        return (await self.db.execute(stmt)).scalar_one_or_none()

    async def add(
        self,
        *,
        org_id: uuid.UUID,
        invited_email: str,
        invited_by_user_id: uuid.UUID,
        role_to_assign_id: uuid.UUID,
        token: str,
        expires_at: datetime,
    ) -> Invitation:
        invitation = Invitation(
            org_id=org_id,
            invited_email=invited_email,
            invited_by_user_id=invited_by_user_id,
            role_to_assign_id=role_to_assign_id,
            token=token,
            status=InvitationStatus.PENDING,
            expires_at=expires_at,
        )
        self.db.add(invitation)
        await self.db.flush()
        return invitation

    async def set_status(
        self,
        invitation: Invitation,
        status: InvitationStatus,
        *,
        accepted_by_user_id: Optional[uuid.UUID] = None,
    ) -> Invitation:
        invitation.status = status
        if accepted_by_user_id is not None:
            invitation.accepted_by_user_id = accepted_by_user_id
        await self.db.flush()
        return invitation

    async def list_pending_for_email(
        self, email: str, *, now: datetime
    ) -> list[tuple[Invitation, Organization]]:
        stmt = (
            select(Invitation, Organization)
            .join(Organization, Organization.org_id == Invitation.org_id)
            .where(Invitation.invited_email == email)
            .where(Invitation.status == InvitationStatus.PENDING)
            .where(Invitation.expires_at > now)
            .order_by(Invitation.created_at.desc())
        )
        return [(inv, org) for inv, org in (await self.db.execute(stmt)).all()]

    async def list_for_org(self, org_id: uuid.UUID) -> list[Invitation]:
        stmt = (
            select(Invitation)
            .where(Invitation.org_id == org_id)
            .order_by(Invitation.created_at.desc())
        )
        return list((await self.db.execute(stmt)).scalars().all())
