"""initial organization access schema

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy import text

# revision identifiers, used by Alembic.
revision = "3f1c2a9d7b10"
down_revision = None
branch_labels = None
depends_on = None

PENDING_INDEX_NAME = "uq_organization_invitations_pending_org_email"

invitation_status = sa.Enum(
    "pending",
    "accepted",
    "declined",
    "expired",
    name="invitation_status",
)


def upgrade() -> None:
    # -----------------------------------------------------
    # 1) organizations + global permission catalog
    # -----------------------------------------------------
    op.create_table(
        "organizations",
        sa.Column("org_id", sa.Uuid(), primary_key=True),
        sa.Column("org_handle", sa.String(length=50), nullable=False),
        sa.Column("org_name", sa.String(length=100), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_organizations_org_handle", "organizations", ["org_handle"], unique=True)

    op.create_table(
        "app_permissions",
        sa.Column("permission_id", sa.String(length=100), primary_key=True),
        sa.Column("description", sa.Text(), nullable=True),
    )

    # -----------------------------------------------------
    # 2) roles + role -> permission grants
    # -----------------------------------------------------
    op.create_table(
        "organization_roles",
        sa.Column("org_role_id", sa.Uuid(), primary_key=True),
        sa.Column(
            "org_id",
            sa.Uuid(),
            sa.ForeignKey("organizations.org_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("role_name", sa.String(length=50), nullable=False),
        sa.Column("is_system_role", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("org_id", "role_name", name="uq_organization_roles_org_name"),
    )
    op.create_index(
        "ix_organization_roles_org_created_at",
        "organization_roles",
        ["org_id", "created_at"],
    )

    op.create_table(
        "organization_role_permissions",
        sa.Column(
            "org_role_id",
            sa.Uuid(),
            sa.ForeignKey("organization_roles.org_role_id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "permission_id",
            sa.String(length=100),
            sa.ForeignKey("app_permissions.permission_id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    # -----------------------------------------------------
    # 3) members (role in use cannot be deleted)
    # -----------------------------------------------------
    op.create_table(
        "organization_members",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "org_id",
            sa.Uuid(),
            sa.ForeignKey("organizations.org_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column(
            "org_role_id",
            sa.Uuid(),
            sa.ForeignKey("organization_roles.org_role_id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("display_name", sa.String(length=200), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("org_id", "user_id", name="uq_organization_members_org_user"),
        sa.UniqueConstraint("org_id", "email", name="uq_organization_members_org_email"),
    )
    op.create_index("ix_organization_members_role_id", "organization_members", ["org_role_id"])

    # -----------------------------------------------------
    # 4) invitations
    # -----------------------------------------------------
    op.create_table(
        "organization_invitations",
        sa.Column("invitation_id", sa.Uuid(), primary_key=True),
        sa.Column(
            "org_id",
            sa.Uuid(),
            sa.ForeignKey("organizations.org_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("invited_email", sa.String(length=320), nullable=False),
        sa.Column("invited_by_user_id", sa.Uuid(), nullable=False),
        sa.Column(
            "role_to_assign_id",
            sa.Uuid(),
            sa.ForeignKey("organization_roles.org_role_id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("token", sa.String(length=200), nullable=False),
        sa.Column("status", invitation_status, nullable=False, server_default="pending"),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("accepted_by_user_id", sa.Uuid(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("token", name="uq_organization_invitations_token"),
    )
    op.create_index(
        "ix_organization_invitations_org_email",
        "organization_invitations",
        ["org_id", "invited_email"],
    )
    op.create_index(
        "ix_organization_invitations_org_created_at",
        "organization_invitations",
        ["org_id", "created_at"],
    )
    op.create_index(
        PENDING_INDEX_NAME,
        "organization_invitations",
        ["org_id", "invited_email"],
        unique=True,
        postgresql_where=text("status = 'pending'"),
        sqlite_where=text("status = 'pending'"),
    )


def downgrade() -> None:
    op.drop_index(PENDING_INDEX_NAME, table_name="organization_invitations")
    op.drop_index("ix_organization_invitations_org_created_at", table_name="organization_invitations")
    op.drop_index("ix_organization_invitations_org_email", table_name="organization_invitations")
    op.drop_table("organization_invitations")
    invitation_status.drop(op.get_bind(), checkfirst=True)

    op.drop_index("ix_organization_members_role_id", table_name="organization_members")
    op.drop_table("organization_members")

    op.drop_table("organization_role_permissions")
    op.drop_index("ix_organization_roles_org_created_at", table_name="organization_roles")
    op.drop_table("organization_roles")

    op.drop_table("app_permissions")
    op.drop_index("ix_organizations_org_handle", table_name="organizations")
    op.drop_table("organizations")
