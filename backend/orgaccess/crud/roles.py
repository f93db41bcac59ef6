# orgaccess/crud/roles.py
from __future__ import annotations

import uuid
from collections import defaultdict
from typing import Iterable, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from orgaccess.db.base import utcnow
from orgaccess.models.invitation import Invitation
from orgaccess.models.member import Member
from orgaccess.models.role import Role, RolePermission


class RoleRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, org_id: uuid.UUID, role_id: uuid.UUID) -> Optional[Role]:
        stmt = select(Role).where(
            Role.org_id == org_id,
            Role.org_role_id == role_id,
        )
        return (await self.db.execute(stmt)).scalar_one_or_none()

    async def get_by_name(self, org_id: uuid.UUID, role_name: str) -> Optional[Role]:
        stmt = select(Role).where(
            Role.org_id == org_id,
            Role.role_name == role_name,
        )
        return (await self.db.execute(stmt)).scalar_one_or_none()

    async def list_for_org(self, org_id: uuid.UUID) -> list[Role]:
        stmt = (
            select(Role)
            .where(Role.org_id == org_id)
            .order_by(Role.created_at.asc())
        )
        return list((await self.db.execute(stmt)).scalars().all())

    async def add(self, org_id: uuid.UUID, role_name: str, *, is_system_role: bool = False) -> Role:
        role = Role(org_id=org_id, role_name=role_name, is_system_role=is_system_role)
        self.db.add(role)
        await self.db.flush()
        return role

    async def rename(self, role: Role, role_name: str) -> Role:
        role.role_name = role_name
        await self.db.flush()
        return role

    async def touch(self, role: Role) -> None:
        # Permission-set changes still bump the role's updated_at.
        role.updated_at = utcnow()
        await self.db.flush()

    async def delete(self, role: Role) -> None:
        await self.db.execute(
            delete(RolePermission).where(RolePermission.org_role_id == role.org_role_id)
        )
        await self.db.delete(role)
        await self.db.flush()

    async def permission_ids(self, role_id: uuid.UUID) -> set[str]:
        stmt = select(RolePermission.permission_id).where(RolePermission.org_role_id == role_id)
        return set((await self.db.execute(stmt)).scalars().all())

    async def permission_ids_for_roles(self, role_ids: Iterable[uuid.UUID]) -> dict[uuid.UUID, set[str]]:
        ids = list(role_ids)
        grouped: dict[uuid.UUID, set[str]] = defaultdict(set)
        if not ids:
            return grouped
        stmt = select(RolePermission.org_role_id, RolePermission.permission_id).where(
            RolePermission.org_role_id.in_(ids)
        )
        for role_id, permission_id in (await self.db.execute(stmt)).all():
            grouped[role_id].add(permission_id)
        return grouped

    async def has_permission(self, role_id: uuid.UUID, permission_id: str) -> bool:
        stmt = select(func.count()).select_from(RolePermission).where(
            RolePermission.org_role_id == role_id,
            RolePermission.permission_id == permission_id,
        )
        return int((await self.db.execute(stmt)).scalar() or 0) > 0

    async def replace_permissions(self, role_id: uuid.UUID, permission_ids: Iterable[str]) -> None:
        """Delete-all then insert-new; the set is never patched in place."""
        await self.db.execute(delete(RolePermission).where(RolePermission.org_role_id == role_id))
        self.db.add_all(
            RolePermission(org_role_id=role_id, permission_id=pid) for pid in sorted(set(permission_ids))
        )
        await self.db.flush()

    async def count_members(self, org_id: uuid.UUID, role_id: uuid.UUID) -> int:
        stmt = (
            select(func.count(Member.id))
            .where(Member.org_id == org_id)
            .where(Member.org_role_id == role_id)
        )
        return int((await self.db.execute(stmt)).scalar() or 0)

    async def count_invitations(self, role_id: uuid.UUID) -> int:
        """Invitations of any status that name this role."""
        stmt = select(func.count(Invitation.invitation_id)).where(Invitation.role_to_assign_id == role_id)
        return int((await self.db.execute(stmt)).scalar() or 0)
