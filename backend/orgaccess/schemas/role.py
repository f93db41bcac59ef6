from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class RoleCreate(BaseModel):
    role_name: str = Field(min_length=1, max_length=50)
    permission_ids: List[str] = Field(default_factory=list)


class RoleUpdate(BaseModel):
    """Omit a field to leave it unchanged; an empty permission list clears the role."""

    role_name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    permission_ids: Optional[List[str]] = None


class RoleOut(BaseModel):
    org_role_id: UUID
    org_id: UUID
    role_name: str
    is_system_role: bool
    permissions: List[str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
