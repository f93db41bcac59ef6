from typing import List, Optional

from pydantic import BaseModel


class AppPermissionOut(BaseModel):
    permission_id: str
    description: Optional[str] = None

    model_config = {"from_attributes": True}


class MemberPermissionsOut(BaseModel):
    permissions: List[str]
