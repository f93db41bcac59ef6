# backend/orgaccess/models/member.py

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from orgaccess.db.base import Base, utcnow


class Member(Base):
    __tablename__ = "organization_members"
    __table_args__ = (
        UniqueConstraint("org_id", "user_id", name="uq_organization_members_org_user"),
        UniqueConstraint("org_id", "email", name="uq_organization_members_org_email"),
        Index("ix_organization_members_role_id", "org_role_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    org_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("organizations.org_id", ondelete="CASCADE"),
        nullable=False,
    )
    # Identity lives with the external auth provider; no local users table.
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)

    # Exactly one role per member. RESTRICT: a role in use cannot be deleted.
    org_role_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("organization_roles.org_role_id", ondelete="RESTRICT"),
        nullable=False,
    )

    # Denormalized display snapshot (email is stored lowercased)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    display_name: Mapped[str | None] = mapped_column(String(200), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )
