"""
Membership manager.

Owns the member roster of an organization. Guards:
- nobody changes or removes themselves through these operations
- members cannot be moved onto a system role
- members currently on a system role are out of reach of reassignment and removal
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Optional

import structlog
from sqlalchemy.exc import IntegrityError

from orgaccess.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from orgaccess.core.roles import SystemRole
from orgaccess.crud.members import MemberRepository
from orgaccess.crud.roles import RoleRepository
from orgaccess.db.unit_of_work import UnitOfWork
from orgaccess.models.member import Member

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class MemberListing:
    user_id: uuid.UUID
    email: str
    display_name: str
    role_id: uuid.UUID
    role_name: str


@dataclass(frozen=True)
class UserMembership:
    org_id: uuid.UUID
    org_name: str
    org_handle: str
    role_id: uuid.UUID
    role_name: str


def normalize_email(email: Optional[str]) -> Optional[str]:
    if email is None:
        return None
    cleaned = email.strip().lower()
    return cleaned or None


def default_display_name(email: Optional[str], fallback: str) -> str:
    if email and "@" in email:
        local = email.split("@", 1)[0]
        if local:
            return local
    return fallback


class MembershipManager:
    def __init__(self, uow: UnitOfWork, members: MemberRepository, roles: RoleRepository):
        self.uow = uow
        self.members = members
        self.roles = roles

    async def find_member(self, org_id: uuid.UUID, user_id: uuid.UUID) -> Optional[Member]:
        return await self.members.get(org_id, user_id)

    async def find_member_by_email(self, org_id: uuid.UUID, email: Optional[str]) -> Optional[Member]:
        email = normalize_email(email)
        if email is None:
            return None
        return await self.members.get_by_email(org_id, email)

    async def get_member(self, org_id: uuid.UUID, user_id: uuid.UUID) -> Member:
        member = await self.find_member(org_id, user_id)
        if member is None:
            raise NotFoundError(f"User {user_id} is not a member of this organization.")
        return member

    async def create_owner_membership(
        self,
        org_id: uuid.UUID,
        user_id: uuid.UUID,
        email: Optional[str],
        display_name: Optional[str],
    ) -> Member:
        """
        Bind an organization's creator to its Owner role.

        Only organization creation calls this; there is no API route for it.
        """
        async with self.uow:
            owner_role = await self.roles.get_by_name(org_id, SystemRole.OWNER.value)
            if owner_role is None or not owner_role.is_system_role:
                raise NotFoundError("Owner role has not been created for this organization.")

            email = normalize_email(email)
            name = (display_name or "").strip() or default_display_name(email, "Creator")
            try:
                member = await self.members.add(
                    org_id=org_id,
                    user_id=user_id,
                    org_role_id=owner_role.org_role_id,
                    email=email,
                    display_name=name,
                )
            except IntegrityError as exc:
                raise ConflictError("User is already a member of this organization.") from exc

        logger.info("owner_membership_created", org_id=str(org_id), user_id=str(user_id))
        return member

    async def add_member(
        self,
        org_id: uuid.UUID,
        user_id: uuid.UUID,
        role_id: uuid.UUID,
        *,
        email: Optional[str],
        display_name: Optional[str],
    ) -> Member:
        """
        Insert a member row. IntegrityError from the (org, user) / (org, email)
        constraints propagates unchanged so callers can treat a lost race
        as "already a member".
        """
        async with self.uow:
            email = normalize_email(email)
            name = (display_name or "").strip() or default_display_name(email, "Member")
            member = await self.members.add(
                org_id=org_id,
                user_id=user_id,
                org_role_id=role_id,
                email=email,
                display_name=name,
            )

        logger.info("member_added", org_id=str(org_id), user_id=str(user_id), role_id=str(role_id))
        return member

    async def refresh_profile(
        self,
        member: Member,
        *,
        email: Optional[str],
        display_name: Optional[str],
    ) -> Member:
        """Refresh the denormalized email/display name snapshot; role is untouched."""
        async with self.uow:
            email = normalize_email(email) or member.email
            name = (display_name or "").strip() or member.display_name or default_display_name(email, "Member")
            try:
                await self.members.update_profile(member, email=email, display_name=name)
            except IntegrityError as exc:
                raise ConflictError("Another member of this organization already uses that email.") from exc
        return member

    async def assign_role(
        self,
        org_id: uuid.UUID,
        target_user_id: uuid.UUID,
        new_role_id: uuid.UUID,
        operator_user_id: uuid.UUID,
    ) -> Member:
        if target_user_id == operator_user_id:
            raise ForbiddenError("You cannot change your own role.")

        async with self.uow:
            new_role = await self.roles.get(org_id, new_role_id)
            if new_role is None:
                raise ValidationError("Specified role not found for this organization.")
            if new_role.is_system_role:
                raise ForbiddenError(f"System role '{new_role.role_name}' cannot be assigned to members.")

            member = await self.get_member(org_id, target_user_id)

            current_role = await self.roles.get(org_id, member.org_role_id)
            if current_role is not None and current_role.is_system_role:
                raise ForbiddenError(
                    f"Members holding the system role '{current_role.role_name}' cannot have their role changed."
                )

            previous_role_id = member.org_role_id
            await self.members.set_role(member, new_role.org_role_id)

        logger.info(
            "member_role_assigned",
            org_id=str(org_id),
            user_id=str(target_user_id),
            operator_id=str(operator_user_id),
            from_role_id=str(previous_role_id),
            to_role_id=str(new_role_id),
        )
        return member

    async def remove_member(
        self,
        org_id: uuid.UUID,
        target_user_id: uuid.UUID,
        operator_user_id: uuid.UUID,
    ) -> None:
        if target_user_id == operator_user_id:
            raise ForbiddenError("You cannot remove yourself from the organization.")

        async with self.uow:
            member = await self.get_member(org_id, target_user_id)

            current_role = await self.roles.get(org_id, member.org_role_id)
            if current_role is not None and current_role.is_system_role:
                raise ForbiddenError(
                    f"Members holding the system role '{current_role.role_name}' cannot be removed."
                )

            await self.members.delete(member)

        logger.info(
            "member_removed",
            org_id=str(org_id),
            user_id=str(target_user_id),
            operator_id=str(operator_user_id),
        )

    async def list_members(self, org_id: uuid.UUID) -> list[MemberListing]:
        rows = await self.members.list_with_roles(org_id)
        return [
            MemberListing(
                user_id=member.user_id,
                email=member.email or "N/A",
                display_name=member.display_name or default_display_name(member.email, "Anonymous"),
                role_id=role.org_role_id,
                role_name=role.role_name,
            )
            for member, role in rows
        ]

    async def list_memberships_for_user(self, user_id: uuid.UUID) -> list[UserMembership]:
        """Every organization the user belongs to, with the role held there."""
        rows = await self.members.list_for_user(user_id)
        return [
            UserMembership(
                org_id=org.org_id,
                org_name=org.org_name,
                org_handle=org.org_handle,
                role_id=role.org_role_id,
                role_name=role.role_name,
            )
            for _member, org, role in rows
        ]
