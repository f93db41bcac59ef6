# orgaccess/crud/organizations.py
from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgaccess.models.organization import Organization


class OrganizationRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, org_id: uuid.UUID) -> Optional[Organization]:
        return await self.db.get(Organization, org_id)

    async def get_by_handle(self, org_handle: str) -> Optional[Organization]:
        stmt = select(Organization).where(Organization.org_handle == org_handle)
        return (await self.db.execute(stmt)).scalar_one_or_none()

    async def add(self, *, org_handle: str, org_name: str) -> Organization:
        org = Organization(org_handle=org_handle, org_name=org_name)
        self.db.add(org)
        await self.db.flush()
        return org
