from __future__ import annotations

import uuid

import pytest

from orgaccess.core.errors import ForbiddenError, NotFoundError, ValidationError

from conftest import make_user


async def add_custom_member(services, org_id, role_name="Staff", email="staff@example.com"):
    role = await services.roles.create_role(org_id, role_name)
    user = make_user(email)
    await services.memberships.add_member(org_id, user.id, role.org_role_id, email=user.email, display_name=None)
    return user, role


@pytest.mark.asyncio
async def test_creator_becomes_owner(services, org, owner):
    member = await services.memberships.get_member(org.org_id, owner.id)
    role = await services.roles.get_role(org.org_id, member.org_role_id)

    assert role.role_name == "Owner"
    assert member.email == "owner@example.com"
    assert member.display_name == "Olive Owner"


@pytest.mark.asyncio
async def test_creator_display_name_falls_back_to_email_local_part(services):
    creator = make_user("Jane.Doe@Example.com")

    org = await services.organizations.create_organization("initech", "Initech", creator)
    member = await services.memberships.get_member(org.org_id, creator.id)

    assert member.email == "jane.doe@example.com"
    assert member.display_name == "jane.doe"


@pytest.mark.asyncio
async def test_list_members_reports_role_names(services, org, owner):
    user, role = await add_custom_member(services, org.org_id)

    listing = {m.user_id: m for m in await services.memberships.list_members(org.org_id)}

    assert listing[owner.id].role_name == "Owner"
    assert listing[user.id].role_name == "Staff"
    assert listing[user.id].role_id == role.org_role_id
    assert listing[user.id].display_name == "staff"


@pytest.mark.asyncio
async def test_assign_role_moves_member(services, org, owner):
    user, _ = await add_custom_member(services, org.org_id)
    lead = await services.roles.create_role(org.org_id, "Lead")

    member = await services.memberships.assign_role(org.org_id, user.id, lead.org_role_id, owner.id)

    assert member.org_role_id == lead.org_role_id


@pytest.mark.asyncio
async def test_cannot_change_own_role(services, org, owner):
    lead = await services.roles.create_role(org.org_id, "Lead")

    with pytest.raises(ForbiddenError):
        await services.memberships.assign_role(org.org_id, owner.id, lead.org_role_id, owner.id)


@pytest.mark.asyncio
async def test_cannot_assign_system_role(services, org, owner):
    user, _ = await add_custom_member(services, org.org_id)
    owner_role_id = (await services.roles.roles.get_by_name(org.org_id, "Owner")).org_role_id

    with pytest.raises(ForbiddenError):
        await services.memberships.assign_role(org.org_id, user.id, owner_role_id, owner.id)


@pytest.mark.asyncio
async def test_assign_role_from_other_org_is_validation_error(services, org, owner):
    user, _ = await add_custom_member(services, org.org_id)
    other = await services.organizations.create_organization("globex", "Globex", make_user())
    foreign = await services.roles.create_role(other.org_id, "Foreign")

    with pytest.raises(ValidationError):
        await services.memberships.assign_role(org.org_id, user.id, foreign.org_role_id, owner.id)


@pytest.mark.asyncio
async def test_assign_role_to_non_member_is_not_found(services, org, owner):
    lead = await services.roles.create_role(org.org_id, "Lead")

    with pytest.raises(NotFoundError):
        await services.memberships.assign_role(org.org_id, uuid.uuid4(), lead.org_role_id, owner.id)


@pytest.mark.asyncio
async def test_member_on_system_role_cannot_be_reassigned(services, org, owner):
    member_role_id = (await services.roles.roles.get_by_name(org.org_id, "Member")).org_role_id
    user = make_user("plain@example.com")
    await services.memberships.add_member(org.org_id, user.id, member_role_id, email=user.email, display_name=None)
    lead = await services.roles.create_role(org.org_id, "Lead")

    with pytest.raises(ForbiddenError):
        await services.memberships.assign_role(org.org_id, user.id, lead.org_role_id, owner.id)


@pytest.mark.asyncio
async def test_remove_member(services, org, owner):
    user, _ = await add_custom_member(services, org.org_id)

    await services.memberships.remove_member(org.org_id, user.id, owner.id)

    assert await services.memberships.find_member(org.org_id, user.id) is None


@pytest.mark.asyncio
async def test_cannot_remove_self(services, org, owner):
    with pytest.raises(ForbiddenError):
        await services.memberships.remove_member(org.org_id, owner.id, owner.id)


@pytest.mark.asyncio
async def test_owner_cannot_be_removed_by_another_member(services, org, owner):
    user, _ = await add_custom_member(services, org.org_id)

    with pytest.raises(ForbiddenError):
        await services.memberships.remove_member(org.org_id, owner.id, user.id)

    assert await services.memberships.find_member(org.org_id, owner.id) is not None


@pytest.mark.asyncio
async def test_remove_non_member_is_not_found(services, org, owner):
    with pytest.raises(NotFoundError):
        await services.memberships.remove_member(org.org_id, uuid.uuid4(), owner.id)


@pytest.mark.asyncio
async def test_memberships_for_user_lists_every_org_with_role(services, org, owner):
    globex = await services.organizations.create_organization("globex", "Globex", make_user())
    globex_id = globex.org_id
    analyst = await services.roles.create_role(globex_id, "Analyst")
    await services.memberships.add_member(
        globex_id, owner.id, analyst.org_role_id, email=owner.email, display_name=None
    )

    memberships = await services.memberships.list_memberships_for_user(owner.id)

    assert [(m.org_handle, m.org_name, m.role_name) for m in memberships] == [
        ("acme", "Acme Corp", "Owner"),
        ("globex", "Globex", "Analyst"),
    ]
    assert await services.memberships.list_memberships_for_user(uuid.uuid4()) == []
