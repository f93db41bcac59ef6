# backend/orgaccess/models/invitation.py

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, String, UniqueConstraint, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from orgaccess.core.invitation_status import InvitationStatus
from orgaccess.db.base import Base, utcnow


class Invitation(Base):
    __tablename__ = "organization_invitations"
    __table_args__ = (
        UniqueConstraint("token", name="uq_organization_invitations_token"),
        Index("ix_organization_invitations_org_email", "org_id", "invited_email"),
        Index("ix_organization_invitations_org_created_at", "org_id", "created_at"),
        # At most one pending invitation per org + email
        Index(
            "uq_organization_invitations_pending_org_email",
            "org_id",
            "invited_email",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
    )

    invitation_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    org_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("organizations.org_id", ondelete="CASCADE"),
        nullable=False,
    )

    # Always lowercased on the way in
    invited_email: Mapped[str] = mapped_column(String(320), nullable=False)
    invited_by_user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)

    # RESTRICT: invitations are kept as an audit record, so a role they reference stays
    role_to_assign_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("organization_roles.org_role_id", ondelete="RESTRICT"),
        nullable=False,
    )

    token: Mapped[str] = mapped_column(String(200), nullable=False)

    status: Mapped[InvitationStatus] = mapped_column(
        Enum(
            InvitationStatus,
            name="invitation_status",
            values_callable=lambda e: [m.value for m in e],
            validate_strings=True,
        ),
        nullable=False,
        default=InvitationStatus.PENDING,
    )

    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    accepted_by_user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )
