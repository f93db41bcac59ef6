# orgaccess/crud/members.py
from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgaccess.models.member import Member
from orgaccess.models.organization import Organization
from orgaccess.models.role import Role


class MemberRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, org_id: uuid.UUID, user_id: uuid.UUID) -> Optional[Member]:
        stmt = select(Member).where(
            Member.org_id == org_id,
            Member.user_id == user_id,
        )
        return (await self.db.execute(stmt)).scalar_one_or_none()

    async def get_by_email(self, org_id: uuid.UUID, email: str) -> Optional[Member]:
        stmt = select(Member).where(
            Member.org_id == org_id,
            Member.email == email,
        )
        return (await self.db.execute(stmt)).scalar_one_or_none()

    async def role_id_for(self, org_id: uuid.UUID, user_id: uuid.UUID) -> Optional[uuid.UUID]:
        stmt = select(Member.org_role_id).where(
            Member.org_id == org_id,
            Member.user_id == user_id,
        )
        return (await self.db.execute(stmt)).scalar_one_or_none()

    async def add(
        self,
        *,
        org_id: uuid.UUID,
        user_id: uuid.UUID,
        org_role_id: uuid.UUID,
        email: Optional[str],
        display_name: Optional[str],
    ) -> Member:
        """Insert and flush; uniqueness violations surface as IntegrityError here."""
        member = Member(
            org_id=org_id,
            user_id=user_id,
            org_role_id=org_role_id,
            email=email,
            display_name=display_name,
        )
        self.db.add(member)
        await self.db.flush()
        return member

    async def set_role(self, member: Member, role_id: uuid.UUID) -> Member:
        member.org_role_id = role_id
        await self.db.flush()
        return member

    async def update_profile(self, member: Member, *, email: Optional[str], display_name: Optional[str]) -> Member:
        member.email = email
        member.display_name = display_name
        await self.db.flush()
        return member

    async def delete(self, member: Member) -> None:
        await self.db.delete(member)
        await self.db.flush()

    async def list_with_roles(self, org_id: uuid.UUID) -> list[tuple[Member, Role]]:
        stmt = (
            select(Member, Role)
            .join(Role, Role.org_role_id == Member.org_role_id)
            .where(Member.org_id == org_id)
            .order_by(Member.created_at.asc())
        )
        return [(m, r) for m, r in (await self.db.execute(stmt)).all()]

    async def list_for_user(self, user_id: uuid.UUID) -> list[tuple[Member, Organization, Role]]:
        stmt = (
            select(Member, Organization, Role)
            .join(Organization, Organization.org_id == Member.org_id)
            .join(Role, Role.org_role_id == Member.org_role_id)
            .where(Member.user_id == user_id)
            .order_by(Member.created_at.asc())
        )
        return [(m, o, r) for m, o, r in (await self.db.execute(stmt)).all()]
