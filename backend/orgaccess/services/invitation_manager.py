"""
Invitation manager.

Invitations move pending -> accepted | declined | expired, once. Expiry is
lazy: a pending invitation past its deadline is marked expired the first
time someone tries to accept, decline or re-issue it.

Emails are compared case-insensitively; both sides are normalized with
normalize_email before storage and before comparison.
"""

from __future__ import annotations

import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

import structlog
from sqlalchemy.exc import IntegrityError

from orgaccess.core.errors import ConflictError, ForbiddenError, GoneError, NotFoundError, ValidationError
from orgaccess.core.invitation_status import InvitationStatus, ensure_transition
from orgaccess.crud.invitations import InvitationRepository
from orgaccess.crud.organizations import OrganizationRepository
from orgaccess.db.base import as_aware, utcnow
from orgaccess.db.unit_of_work import UnitOfWork
from orgaccess.models.invitation import Invitation
from orgaccess.models.organization import Organization
from orgaccess.services.membership_manager import MembershipManager, normalize_email
from orgaccess.services.role_store import RoleStore

logger = structlog.get_logger(__name__)

INVITATION_TTL = timedelta(hours=72)
TOKEN_BYTES = 48  # 384 bits before base64


def generate_token() -> str:
    return secrets.token_urlsafe(TOKEN_BYTES)


@dataclass(frozen=True)
class AcceptedInvitation:
    org_id: uuid.UUID
    organization_handle: str
    role_assigned_id: uuid.UUID
    already_member: bool = False


@dataclass(frozen=True)
class PendingInvitation:
    """An open invitation as its recipient sees it."""

    invitation_id: uuid.UUID
    invited_email: str
    status: InvitationStatus
    expires_at: datetime
    created_at: datetime
    org_id: uuid.UUID
    org_name: str
    org_handle: str


class InvitationManager:
    def __init__(
        self,
        uow: UnitOfWork,
        invitations: InvitationRepository,
        organizations: OrganizationRepository,
        roles: RoleStore,
        memberships: MembershipManager,
    ):
        self.uow = uow
        self.invitations = invitations
        self.organizations = organizations
        self.roles = roles
        self.memberships = memberships

    async def _handle_of(self, org_id: uuid.UUID) -> str:
        org: Optional[Organization] = await self.organizations.get(org_id)
        if org is None:
            raise NotFoundError("Organization not found.")
        return org.org_handle

    # -----------------------------
    # Issue / list / resolve
    # -----------------------------
    async def issue_invitation(
        self,
        org_id: uuid.UUID,
        inviter_user_id: uuid.UUID,
        invited_email: str,
        role_id: uuid.UUID,
    ) -> Invitation:
        """
        Create a pending invitation and return it with its token.

        Delivering the token to the invitee is somebody else's job.
        """
        email = normalize_email(invited_email)
        if not email or "@" not in email:
            raise ValidationError("A valid invited email is required.")

        try:
            async with self.uow:
                role = await self.roles.find_role(org_id, role_id)
                if role is None:
                    raise ValidationError("Specified role not found for this organization.")

                if await self.memberships.find_member_by_email(org_id, email) is not None:
                    raise ConflictError("User with this email is already a member of this organization.")

                pending = await self.invitations.get_pending(org_id, email)
                # A past-deadline invitation nobody touched gets expired here instead of blocking
                if pending is not None and not await self._expire_if_due(pending):
                    raise ConflictError("A pending invitation already exists for this email.")

                invitation = await self.invitations.add(
                    org_id=org_id,
                    invited_email=email,
                    invited_by_user_id=inviter_user_id,
                    role_to_assign_id=role.org_role_id,
                    token=generate_token(),
                    expires_at=utcnow() + INVITATION_TTL,
                )
        except IntegrityError as exc:
            # Lost a race against another issuer for the same (org, email)
            raise ConflictError("A pending invitation already exists for this email.") from exc

        logger.info(
            "invitation_issued",
            org_id=str(org_id),
            invitation_id=str(invitation.invitation_id),
            role_id=str(role_id),
            inviter_id=str(inviter_user_id),
        )
        return invitation

    async def list_invitations(self, org_id: uuid.UUID) -> list[Invitation]:
        return await self.invitations.list_for_org(org_id)

    async def list_pending_for_email(self, email: str) -> list[PendingInvitation]:
        """
        Open invitations addressed to `email` across all organizations,
        newest first. Past-deadline ones are left out; they are expired
        when next touched.
        """
        email = normalize_email(email)
        if email is None:
            return []

        rows = await self.invitations.list_pending_for_email(email, now=utcnow())
        return [
            PendingInvitation(
                invitation_id=inv.invitation_id,
                invited_email=inv.invited_email,
                status=InvitationStatus(inv.status),
                expires_at=inv.expires_at,
                created_at=inv.created_at,
                org_id=org.org_id,
                org_name=org.org_name,
                org_handle=org.org_handle,
            )
            for inv, org in rows
        ]

    async def resolve_by_token(self, token: str, *, for_update: bool = False) -> Invitation:
        token = (token or "").strip()
        invitation = await self.invitations.get_by_token(token, for_update=for_update) if token else None
        if invitation is None:
            raise NotFoundError("Invalid invitation token.")
        return invitation

    # -----------------------------
    # Shared accept/decline checks
    # -----------------------------
    async def _open_pending(self, token: str) -> Invitation:
        invitation = await self.resolve_by_token(token, for_update=True)
        if invitation.status != InvitationStatus.PENDING:
            raise ConflictError(
                f"Invitation is already {InvitationStatus(invitation.status).value}.",
                context={"status": InvitationStatus(invitation.status).value},
            )
        return invitation

    async def _expire_if_due(self, invitation: Invitation) -> bool:
        if utcnow() <= as_aware(invitation.expires_at):
            return False
        await self.invitations.set_status(
            invitation, ensure_transition(invitation.status, InvitationStatus.EXPIRED)
        )
        logger.info(
            "invitation_expired",
            org_id=str(invitation.org_id),
            invitation_id=str(invitation.invitation_id),
        )
        return True

    @staticmethod
    def _check_recipient(invitation: Invitation, email: Optional[str]) -> None:
        if normalize_email(email) != invitation.invited_email:
            raise ForbiddenError("This invitation was issued to a different email address.")

    # -----------------------------
    # Accept
    # -----------------------------
    async def accept_invitation(
        self,
        token: str,
        user_id: uuid.UUID,
        email: str,
        display_name: Optional[str] = None,
    ) -> AcceptedInvitation:
        """
        Turn a pending invitation into a membership.

        An existing member keeps their current role; only their email and
        display name snapshot are refreshed. If a concurrent accept inserts
        the same member first, the invitation is still marked accepted and
        this caller gets ConflictError. If the insert fails because another
        user holds the email, the invitation stays pending.
        """
        try:
            async with self.uow:
                invitation = await self._open_pending(token)
                if await self._expire_if_due(invitation):
                    result = None
                else:
                    self._check_recipient(invitation, email)
                    result = await self._materialize(invitation, user_id, email, display_name)
        except IntegrityError:
            await self._settle_failed_insert(token, user_id)

        if result is None:
            raise GoneError("Invitation has expired.")

        logger.info(
            "invitation_accepted",
            org_id=str(result.org_id),
            user_id=str(user_id),
            role_id=str(result.role_assigned_id),
            already_member=result.already_member,
        )
        return result

    async def _materialize(
        self,
        invitation: Invitation,
        user_id: uuid.UUID,
        email: str,
        display_name: Optional[str],
    ) -> AcceptedInvitation:
        org_id = invitation.org_id
        handle = await self._handle_of(org_id)

        existing = await self.memberships.find_member(org_id, user_id)
        if existing is not None:
            await self.memberships.refresh_profile(existing, email=email, display_name=display_name)
            await self._mark_accepted(invitation, user_id)
            return AcceptedInvitation(
                org_id=org_id,
                organization_handle=handle,
                role_assigned_id=existing.org_role_id,
                already_member=True,
            )

        holder = await self.memberships.find_member_by_email(org_id, email)
        if holder is not None:
            raise ConflictError("Another member of this organization already uses this email.")

        # IntegrityError here means a concurrent accept won; handled by the caller
        await self.memberships.add_member(
            org_id,
            user_id,
            invitation.role_to_assign_id,
            email=email,
            display_name=display_name,
        )
        await self._mark_accepted(invitation, user_id)
        return AcceptedInvitation(
            org_id=org_id,
            organization_handle=handle,
            role_assigned_id=invitation.role_to_assign_id,
        )

    async def _mark_accepted(self, invitation: Invitation, user_id: uuid.UUID) -> None:
        await self.invitations.set_status(
            invitation,
            ensure_transition(invitation.status, InvitationStatus.ACCEPTED),
            accepted_by_user_id=user_id,
        )

    async def _settle_failed_insert(self, token: str, user_id: uuid.UUID) -> None:
        """
        The member insert hit a unique constraint. If the caller now has a
        member row, a concurrent accept won: record the invitation as used.
        Otherwise another user holds the email and the invitation stays pending.
        Always raises ConflictError.
        """
        async with self.uow:
            invitation = await self.resolve_by_token(token, for_update=True)
            # Straight to the table: whatever lookup fed the failed insert was stale
            member = await self.memberships.members.get(invitation.org_id, user_id)
            if member is not None and invitation.status == InvitationStatus.PENDING:
                await self._mark_accepted(invitation, user_id)

        if member is None:
            logger.info(
                "invitation_accept_email_taken",
                org_id=str(invitation.org_id),
                invitation_id=str(invitation.invitation_id),
                user_id=str(user_id),
            )
            raise ConflictError("Another member of this organization already uses this email.")

        logger.warning(
            "invitation_accept_race_lost",
            org_id=str(invitation.org_id),
            invitation_id=str(invitation.invitation_id),
            user_id=str(user_id),
        )
        raise ConflictError("User is already a member of this organization.")

    # -----------------------------
    # Decline
    # -----------------------------
    async def decline_invitation(self, token: str, email: str) -> Invitation:
        async with self.uow:
            invitation = await self._open_pending(token)
            expired = await self._expire_if_due(invitation)
            if not expired:
                self._check_recipient(invitation, email)
                await self.invitations.set_status(
                    invitation, ensure_transition(invitation.status, InvitationStatus.DECLINED)
                )

        if expired:
            raise GoneError("Invitation has expired.")

        logger.info(
            "invitation_declined",
            org_id=str(invitation.org_id),
            invitation_id=str(invitation.invitation_id),
        )
        return invitation
