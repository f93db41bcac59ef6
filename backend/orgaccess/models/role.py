# backend/orgaccess/models/role.py

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from orgaccess.db.base import Base, utcnow


class Role(Base):
    __tablename__ = "organization_roles"
    __table_args__ = (
        UniqueConstraint("org_id", "role_name", name="uq_organization_roles_org_name"),
        Index("ix_organization_roles_org_created_at", "org_id", "created_at"),
    )

    org_role_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("organizations.org_id", ondelete="CASCADE"),
        nullable=False,
    )

    role_name: Mapped[str] = mapped_column(String(50), nullable=False)

    # Owner / Member: never renamed, never deleted
    is_system_role: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )


class RolePermission(Base):
    __tablename__ = "organization_role_permissions"

    org_role_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("organization_roles.org_role_id", ondelete="CASCADE"),
        primary_key=True,
    )
    permission_id: Mapped[str] = mapped_column(
        String(100),
        ForeignKey("app_permissions.permission_id", ondelete="CASCADE"),
        primary_key=True,
    )
