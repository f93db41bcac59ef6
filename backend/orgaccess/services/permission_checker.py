"""
Permission checks.

Stateless and uncached: every call resolves the member's current role and
that role's current permission set, so changes apply on the next check.
A caller without a membership row is denied, never an error.
"""

from __future__ import annotations

import uuid

import structlog

from orgaccess.crud.members import MemberRepository
from orgaccess.crud.roles import RoleRepository

logger = structlog.get_logger(__name__)


class PermissionChecker:
    def __init__(self, members: MemberRepository, roles: RoleRepository):
        self.members = members
        self.roles = roles

    async def has_permission(self, user_id: uuid.UUID, org_id: uuid.UUID, permission_id: str) -> bool:
        role_id = await self.members.role_id_for(org_id, user_id)
        if role_id is None:
            logger.debug("permission_denied_not_member", org_id=str(org_id), user_id=str(user_id))
            return False

        allowed = await self.roles.has_permission(role_id, permission_id)
        if not allowed:
            logger.info(
                "permission_denied",
                org_id=str(org_id),
                user_id=str(user_id),
                permission=permission_id,
            )
        return allowed

    async def list_permissions(self, user_id: uuid.UUID, org_id: uuid.UUID) -> set[str]:
        role_id = await self.members.role_id_for(org_id, user_id)
        if role_id is None:
            return set()
        return await self.roles.permission_ids(role_id)
