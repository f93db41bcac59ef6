"""
Role store.

Owns organization roles and their permission sets. Every public operation
is one unit of work: a role is never left behind without the permission set
it was created with.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

import structlog
from sqlalchemy.exc import IntegrityError

from orgaccess.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from orgaccess.core.roles import SystemRole
from orgaccess.crud.roles import RoleRepository
from orgaccess.db.unit_of_work import UnitOfWork
from orgaccess.models.role import Role
from orgaccess.services.permission_catalog import PermissionCatalog

logger = structlog.get_logger(__name__)

ROLE_NAME_MAX_LENGTH = 50


@dataclass(frozen=True)
class RoleWithPermissions:
    org_role_id: uuid.UUID
    org_id: uuid.UUID
    role_name: str
    is_system_role: bool
    created_at: datetime
    updated_at: datetime
    permissions: list[str] = field(default_factory=list)

    @classmethod
    def build(cls, role: Role, permission_ids: Iterable[str]) -> "RoleWithPermissions":
        return cls(
            org_role_id=role.org_role_id,
            org_id=role.org_id,
            role_name=role.role_name,
            is_system_role=role.is_system_role,
            created_at=role.created_at,
            updated_at=role.updated_at,
            permissions=sorted(permission_ids),
        )


def _clean_role_name(name: str) -> str:
    cleaned = " ".join((name or "").split())
    if not cleaned:
        raise ValidationError("Role name is required.")
    if len(cleaned) > ROLE_NAME_MAX_LENGTH:
        raise ValidationError(f"Role name must be {ROLE_NAME_MAX_LENGTH} characters or fewer.")
    return cleaned


class RoleStore:
    def __init__(self, uow: UnitOfWork, roles: RoleRepository, catalog: PermissionCatalog):
        self.uow = uow
        self.roles = roles
        self.catalog = catalog

    async def _require_role(self, org_id: uuid.UUID, role_id: uuid.UUID) -> Role:
        role = await self.roles.get(org_id, role_id)
        if role is None:
            raise NotFoundError("Role not found in this organization.")
        return role

    async def _insert_role(self, org_id: uuid.UUID, name: str, *, is_system_role: bool) -> Role:
        try:
            return await self.roles.add(org_id, name, is_system_role=is_system_role)
        except IntegrityError as exc:
            raise ConflictError(f"Role name '{name}' already exists in this organization.") from exc

    async def create_role(
        self,
        org_id: uuid.UUID,
        name: str,
        permission_ids: Iterable[str] = (),
    ) -> RoleWithPermissions:
        role_name = _clean_role_name(name)

        async with self.uow:
            if await self.roles.get_by_name(org_id, role_name) is not None:
                raise ConflictError(f"Role name '{role_name}' already exists in this organization.")

            requested = await self.catalog.validate(permission_ids)

            role = await self._insert_role(org_id, role_name, is_system_role=False)
            # Runs in the same transaction: a failure here rolls the role back too.
            await self.roles.replace_permissions(role.org_role_id, requested)

        logger.info(
            "role_created",
            org_id=str(org_id),
            role_id=str(role.org_role_id),
            role_name=role_name,
            permissions=len(requested),
        )
        return RoleWithPermissions.build(role, requested)

    async def update_role(
        self,
        org_id: uuid.UUID,
        role_id: uuid.UUID,
        *,
        name: Optional[str] = None,
        permission_ids: Optional[Iterable[str]] = None,
    ) -> RoleWithPermissions:
        """
        Rename and/or replace the permission set of a role.

        `permission_ids=None` leaves permissions alone; an empty iterable
        clears them. System roles keep their names but their permission
        sets may be edited.
        """
        async with self.uow:
            role = await self._require_role(org_id, role_id)

            new_name = None
            if name is not None:
                new_name = _clean_role_name(name)
                if new_name == role.role_name:
                    new_name = None

            if new_name is not None and role.is_system_role:
                raise ForbiddenError("System role names cannot be changed.")

            requested = None
            if permission_ids is not None:
                requested = await self.catalog.validate(permission_ids)

            if new_name is not None:
                clash = await self.roles.get_by_name(org_id, new_name)
                if clash is not None and clash.org_role_id != role.org_role_id:
                    raise ConflictError(f"Role name '{new_name}' already exists in this organization.")
                try:
                    await self.roles.rename(role, new_name)
                except IntegrityError as exc:
                    raise ConflictError(f"Role name '{new_name}' already exists in this organization.") from exc

            if requested is not None:
                await self.roles.replace_permissions(role.org_role_id, requested)

            await self.roles.touch(role)
            current = await self.roles.permission_ids(role.org_role_id)

        logger.info(
            "role_updated",
            org_id=str(org_id),
            role_id=str(role_id),
            renamed=new_name is not None,
            permissions_replaced=requested is not None,
        )
        return RoleWithPermissions.build(role, current)

    async def delete_role(self, org_id: uuid.UUID, role_id: uuid.UUID) -> None:
        async with self.uow:
            role = await self._require_role(org_id, role_id)

            if role.is_system_role:
                raise ForbiddenError(f"System role '{role.role_name}' cannot be deleted.")

            holders = await self.roles.count_members(org_id, role_id)
            if holders > 0:
                raise ConflictError(
                    f"Cannot delete role '{role.role_name}' as it is currently assigned to "
                    f"{holders} member(s). Please reassign members first.",
                    context={"members": holders},
                )

            invitations = await self.roles.count_invitations(role_id)
            if invitations > 0:
                raise ConflictError(
                    f"Cannot delete role '{role.role_name}' as {invitations} invitation(s) reference it.",
                    context={"invitations": invitations},
                )

            role_name = role.role_name
            await self.roles.delete(role)

        logger.info("role_deleted", org_id=str(org_id), role_id=str(role_id), role_name=role_name)

    async def get_role(self, org_id: uuid.UUID, role_id: uuid.UUID) -> Role:
        return await self._require_role(org_id, role_id)

    async def find_role(self, org_id: uuid.UUID, role_id: uuid.UUID) -> Optional[Role]:
        return await self.roles.get(org_id, role_id)

    async def list_roles(self, org_id: uuid.UUID) -> list[RoleWithPermissions]:
        roles = await self.roles.list_for_org(org_id)
        grants = await self.roles.permission_ids_for_roles(r.org_role_id for r in roles)
        return [RoleWithPermissions.build(r, grants.get(r.org_role_id, ())) for r in roles]

    async def bootstrap_organization_roles(self, org_id: uuid.UUID) -> tuple[Role, Role]:
        """
        Create the Owner and Member system roles for a brand new organization.

        Owner gets a copy of the catalog as it is right now; permissions
        added to the catalog later are not granted retroactively. Member
        starts empty.
        """
        async with self.uow:
            snapshot = await self.catalog.snapshot()

            owner = await self._insert_role(org_id, SystemRole.OWNER.value, is_system_role=True)
            member = await self._insert_role(org_id, SystemRole.MEMBER.value, is_system_role=True)

            await self.roles.replace_permissions(owner.org_role_id, snapshot)

        logger.info(
            "organization_roles_bootstrapped",
            org_id=str(org_id),
            owner_role_id=str(owner.org_role_id),
            member_role_id=str(member.org_role_id),
            owner_permissions=len(snapshot),
        )
        return owner, member
