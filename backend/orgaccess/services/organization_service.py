from __future__ import annotations

import re
import uuid

import structlog
from sqlalchemy.exc import IntegrityError

from orgaccess.core.errors import ConflictError, NotFoundError, ValidationError
from orgaccess.core.security import AuthenticatedUser
from orgaccess.crud.organizations import OrganizationRepository
from orgaccess.db.unit_of_work import UnitOfWork
from orgaccess.models.organization import Organization
from orgaccess.services.membership_manager import MembershipManager
from orgaccess.services.role_store import RoleStore

logger = structlog.get_logger(__name__)

# Lowercase alphanumeric words joined by single hyphens, 3-50 chars
HANDLE_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"
_HANDLE_RE = re.compile(HANDLE_PATTERN)


def normalize_handle(handle: str) -> str:
    cleaned = (handle or "").strip().lower()
    if not (3 <= len(cleaned) <= 50) or not _HANDLE_RE.match(cleaned):
        raise ValidationError(
            "Handle must be 3-50 lowercase alphanumeric characters with hyphens "
            "and cannot start/end with a hyphen."
        )
    return cleaned


class OrganizationService:
    def __init__(
        self,
        uow: UnitOfWork,
        organizations: OrganizationRepository,
        roles: RoleStore,
        memberships: MembershipManager,
    ):
        self.uow = uow
        self.organizations = organizations
        self.roles = roles
        self.memberships = memberships

    async def create_organization(self, handle: str, name: str, creator: AuthenticatedUser) -> Organization:
        """
        Create an organization, its Owner/Member system roles and the
        creator's Owner membership. All or nothing.
        """
        org_handle = normalize_handle(handle)
        org_name = (name or "").strip()
        if not org_name:
            raise ValidationError("Organization name is required.")

        try:
            async with self.uow:
                if await self.organizations.get_by_handle(org_handle) is not None:
                    raise ConflictError(f"Organization handle '{org_handle}' is already taken.")

                org = await self.organizations.add(org_handle=org_handle, org_name=org_name)
                await self.roles.bootstrap_organization_roles(org.org_id)
                await self.memberships.create_owner_membership(
                    org.org_id,
                    creator.id,
                    creator.email,
                    creator.display_name,
                )
        except IntegrityError as exc:
            raise ConflictError(f"Organization handle '{org_handle}' is already taken.") from exc

        logger.info(
            "organization_created",
            org_id=str(org.org_id),
            org_handle=org_handle,
            creator_id=str(creator.id),
        )
        return org

    async def get_by_handle(self, handle: str) -> Organization:
        org = await self.organizations.get_by_handle((handle or "").strip().lower())
        if org is None:
            raise NotFoundError("Organization not found.")
        return org

    async def resolve_handle(self, handle: str) -> uuid.UUID:
        return (await self.get_by_handle(handle)).org_id
