import re
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from orgaccess.services.organization_service import HANDLE_PATTERN

HANDLE_REGEX = re.compile(HANDLE_PATTERN)


class OrganizationCreate(BaseModel):
    org_handle: str = Field(min_length=3, max_length=50, description="Lowercase letters, digits and hyphens")
    org_name: str = Field(min_length=1, max_length=100)

    @field_validator("org_handle")
    @classmethod
    def validate_handle(cls, v: str) -> str:
        v = v.strip().lower()

        if not HANDLE_REGEX.match(v):
            raise ValueError("Handle must be lowercase alphanumeric with hyphens and cannot start/end with a hyphen")

        return v


class OrganizationOut(BaseModel):
    org_id: UUID
    org_handle: str
    org_name: str
    created_at: datetime

    model_config = {"from_attributes": True}
