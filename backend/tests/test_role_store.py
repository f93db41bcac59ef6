from __future__ import annotations

import uuid

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from orgaccess.auth.permissions import PERM, PERMISSION_DESCRIPTIONS
from orgaccess.core.errors import ConflictError, ForbiddenError, InternalError, NotFoundError, ValidationError
from orgaccess.crud.permissions import PermissionRepository
from orgaccess.models.invitation import Invitation
from orgaccess.models.role import Role, RolePermission
from orgaccess.services.permission_catalog import PermissionCatalog

from conftest import make_user


async def role_count(db, org_id) -> int:
    return (await db.execute(select(func.count()).select_from(Role).where(Role.org_id == org_id))).scalar_one()


@pytest.mark.asyncio
async def test_bootstrap_gives_owner_full_catalog_and_member_nothing(services, org):
    roles = {r.role_name: r for r in await services.roles.list_roles(org.org_id)}

    assert set(roles) == {"Owner", "Member"}
    assert roles["Owner"].is_system_role and roles["Member"].is_system_role
    assert roles["Owner"].permissions == sorted(PERMISSION_DESCRIPTIONS)
    assert roles["Member"].permissions == []


@pytest.mark.asyncio
async def test_create_role_with_permissions(services, org):
    role = await services.roles.create_role(
        org.org_id,
        "  Hiring   Manager ",
        [PERM.JOB_POSTS_CREATE, PERM.MEMBERS_READ, PERM.JOB_POSTS_CREATE],
    )

    assert role.role_name == "Hiring Manager"
    assert role.is_system_role is False
    assert role.permissions == [PERM.JOB_POSTS_CREATE, PERM.MEMBERS_READ]


@pytest.mark.asyncio
async def test_create_role_rejects_duplicate_name(services, org):
    await services.roles.create_role(org.org_id, "Recruiter")

    with pytest.raises(ConflictError):
        await services.roles.create_role(org.org_id, "Recruiter")


@pytest.mark.asyncio
async def test_same_role_name_allowed_in_different_orgs(services, org):
    other = await services.organizations.create_organization("globex", "Globex", make_user())

    await services.roles.create_role(org.org_id, "Recruiter")
    role = await services.roles.create_role(other.org_id, "Recruiter")

    assert role.org_id == other.org_id


@pytest.mark.asyncio
async def test_create_role_with_unknown_permission_leaves_nothing_behind(services, db, org):
    before = await role_count(db, org.org_id)

    with pytest.raises(ValidationError) as exc_info:
        await services.roles.create_role(org.org_id, "Broken", [PERM.MEMBERS_READ, "billing:refund"])

    assert "billing:refund" in exc_info.value.message
    assert await role_count(db, org.org_id) == before
    assert await services.roles.roles.get_by_name(org.org_id, "Broken") is None


@pytest.mark.asyncio
async def test_create_role_rejects_blank_name(services, org):
    with pytest.raises(ValidationError):
        await services.roles.create_role(org.org_id, "   ")


@pytest.mark.asyncio
async def test_update_role_replaces_permission_set(services, org):
    role = await services.roles.create_role(org.org_id, "Editor", [PERM.JOB_POSTS_EDIT])

    updated = await services.roles.update_role(
        org.org_id,
        role.org_role_id,
        permission_ids=[PERM.JOB_POSTS_PUBLISH, PERM.DEPARTMENTS_EDIT],
    )

    assert updated.permissions == [PERM.DEPARTMENTS_EDIT, PERM.JOB_POSTS_PUBLISH]
    assert updated.role_name == "Editor"


@pytest.mark.asyncio
async def test_update_role_with_empty_list_clears_permissions(services, org):
    role = await services.roles.create_role(org.org_id, "Editor", [PERM.JOB_POSTS_EDIT])

    updated = await services.roles.update_role(org.org_id, role.org_role_id, permission_ids=[])

    assert updated.permissions == []


@pytest.mark.asyncio
async def test_update_role_name_only_keeps_permissions(services, org):
    role = await services.roles.create_role(org.org_id, "Editor", [PERM.JOB_POSTS_EDIT])

    updated = await services.roles.update_role(org.org_id, role.org_role_id, name="Senior Editor")

    assert updated.role_name == "Senior Editor"
    assert updated.permissions == [PERM.JOB_POSTS_EDIT]


@pytest.mark.asyncio
async def test_update_role_rename_clash_is_conflict(services, org):
    await services.roles.create_role(org.org_id, "Editor")
    role = await services.roles.create_role(org.org_id, "Writer")

    with pytest.raises(ConflictError):
        await services.roles.update_role(org.org_id, role.org_role_id, name="Editor")


@pytest.mark.asyncio
async def test_update_role_invalid_permission_keeps_old_set(services, org):
    role = await services.roles.create_role(org.org_id, "Editor", [PERM.JOB_POSTS_EDIT])

    with pytest.raises(ValidationError):
        await services.roles.update_role(
            org.org_id, role.org_role_id, name="Renamed", permission_ids=["nope:nope"]
        )

    roles = {r.role_name: r for r in await services.roles.list_roles(org.org_id)}
    assert "Renamed" not in roles
    assert roles["Editor"].permissions == [PERM.JOB_POSTS_EDIT]


@pytest.mark.asyncio
async def test_system_role_cannot_be_renamed_but_permissions_can_change(services, org):
    member_role_id = (await services.roles.roles.get_by_name(org.org_id, "Member")).org_role_id

    with pytest.raises(ForbiddenError):
        await services.roles.update_role(org.org_id, member_role_id, name="Staff")

    updated = await services.roles.update_role(org.org_id, member_role_id, permission_ids=[PERM.ORG_READ])
    assert updated.role_name == "Member"
    assert updated.permissions == [PERM.ORG_READ]


@pytest.mark.asyncio
async def test_update_unknown_role_is_not_found(services, org):
    with pytest.raises(NotFoundError):
        await services.roles.update_role(org.org_id, uuid.uuid4(), name="Ghost")


@pytest.mark.asyncio
async def test_delete_role_removes_grants(services, db, org):
    role = await services.roles.create_role(org.org_id, "Temp", [PERM.ORG_READ, PERM.ORG_EDIT])

    await services.roles.delete_role(org.org_id, role.org_role_id)

    assert await services.roles.find_role(org.org_id, role.org_role_id) is None
    grants = (
        await db.execute(
            select(func.count()).select_from(RolePermission).where(RolePermission.org_role_id == role.org_role_id)
        )
    ).scalar_one()
    assert grants == 0


@pytest.mark.asyncio
async def test_system_roles_cannot_be_deleted(services, org):
    for name in ("Owner", "Member"):
        role = await services.roles.roles.get_by_name(org.org_id, name)
        with pytest.raises(ForbiddenError):
            await services.roles.delete_role(org.org_id, role.org_role_id)


@pytest.mark.asyncio
async def test_role_in_use_cannot_be_deleted(services, org):
    role = await services.roles.create_role(org.org_id, "Reviewer")
    await services.memberships.add_member(
        org.org_id, uuid.uuid4(), role.org_role_id, email="rev@example.com", display_name=None
    )

    with pytest.raises(ConflictError) as exc_info:
        await services.roles.delete_role(org.org_id, role.org_role_id)

    assert exc_info.value.context == {"members": 1}
    assert await services.roles.find_role(org.org_id, role.org_role_id) is not None


@pytest.mark.asyncio
async def test_role_from_another_org_is_not_found(services, org):
    other = await services.organizations.create_organization("globex", "Globex", make_user())
    foreign = await services.roles.create_role(other.org_id, "Foreign")

    with pytest.raises(NotFoundError):
        await services.roles.delete_role(org.org_id, foreign.org_role_id)


@pytest.mark.asyncio
async def test_role_named_by_an_invitation_cannot_be_deleted(services, db, org, owner):
    role = await services.roles.create_role(org.org_id, "Temp")
    role_id = role.org_role_id
    invitation = await services.invitations.issue_invitation(org.org_id, owner.id, "temp@example.com", role_id)
    invitation_id = invitation.invitation_id
    await services.invitations.decline_invitation(invitation.token, "temp@example.com")

    with pytest.raises(ConflictError) as exc_info:
        await services.roles.delete_role(org.org_id, role_id)

    assert exc_info.value.context == {"invitations": 1}
    assert await services.roles.find_role(org.org_id, role_id) is not None
    kept = (
        await db.execute(select(func.count()).select_from(Invitation).where(Invitation.invitation_id == invitation_id))
    ).scalar_one()
    assert kept == 1


@pytest.mark.asyncio
async def test_storage_failure_mid_create_rolls_role_back(services, db, org, monkeypatch):
    before = await role_count(db, org.org_id)

    async def failing_replace(role_id, permission_ids):
        raise OperationalError("INSERT INTO organization_role_permissions", {}, Exception("disk I/O error"))

    monkeypatch.setattr(services.roles.roles, "replace_permissions", failing_replace)

    with pytest.raises(InternalError):
        await services.roles.create_role(org.org_id, "Doomed", [PERM.MEMBERS_READ])

    assert await role_count(db, org.org_id) == before
    assert await services.roles.roles.get_by_name(org.org_id, "Doomed") is None


@pytest.mark.asyncio
async def test_catalog_growth_reaches_new_owners_only(services, db, org):
    extended = PermissionCatalog(
        PermissionRepository(db),
        {**PERMISSION_DESCRIPTIONS, "reports:export": "Export organization reports"},
    )
    async with services.uow:
        assert await extended.seed() == 1

    old_owner = await services.roles.roles.get_by_name(org.org_id, "Owner")
    assert "reports:export" not in await services.roles.roles.permission_ids(old_owner.org_role_id)

    other = await services.organizations.create_organization("globex", "Globex", make_user())
    new_owner = await services.roles.roles.get_by_name(other.org_id, "Owner")
    assert "reports:export" in await services.roles.roles.permission_ids(new_owner.org_role_id)
