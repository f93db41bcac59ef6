from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from orgaccess.crud.invitations import InvitationRepository
from orgaccess.crud.members import MemberRepository
from orgaccess.crud.organizations import OrganizationRepository
from orgaccess.crud.permissions import PermissionRepository
from orgaccess.crud.roles import RoleRepository
from orgaccess.db.unit_of_work import UnitOfWork
from orgaccess.services.invitation_manager import InvitationManager
from orgaccess.services.membership_manager import MembershipManager
from orgaccess.services.organization_service import OrganizationService
from orgaccess.services.permission_catalog import PermissionCatalog
from orgaccess.services.permission_checker import PermissionChecker
from orgaccess.services.role_store import RoleStore


@dataclass
class AccessServices:
    """Every service wired over one session and one shared unit of work."""

    uow: UnitOfWork
    catalog: PermissionCatalog
    roles: RoleStore
    checker: PermissionChecker
    memberships: MembershipManager
    invitations: InvitationManager
    organizations: OrganizationService

    @classmethod
    def from_session(cls, db: AsyncSession) -> "AccessServices":
        uow = UnitOfWork(db)
        role_repo = RoleRepository(db)
        member_repo = MemberRepository(db)
        organizations = OrganizationRepository(db)

        catalog = PermissionCatalog(PermissionRepository(db))
        roles = RoleStore(uow, role_repo, catalog)
        memberships = MembershipManager(uow, member_repo, role_repo)

        return cls(
            uow=uow,
            catalog=catalog,
            roles=roles,
            checker=PermissionChecker(member_repo, role_repo),
            memberships=memberships,
            invitations=InvitationManager(uow, InvitationRepository(db), organizations, roles, memberships),
            organizations=OrganizationService(uow, organizations, roles, memberships),
        )
