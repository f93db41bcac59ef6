from uuid import UUID

from pydantic import BaseModel


class MemberOut(BaseModel):
    user_id: UUID
    email: str
    display_name: str
    role_id: UUID
    role_name: str

    model_config = {"from_attributes": True}


class MemberRoleUpdate(BaseModel):
    role_id: UUID


class MemberRoleOut(BaseModel):
    user_id: UUID
    role_id: UUID


class MyMembershipOut(BaseModel):
    org_id: UUID
    org_name: str
    org_handle: str
    role_id: UUID
    role_name: str

    model_config = {"from_attributes": True}
