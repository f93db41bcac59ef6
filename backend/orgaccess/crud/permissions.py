# orgaccess/crud/permissions.py
from __future__ import annotations

from typing import Iterable, Mapping

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgaccess.models.permission import AppPermission


class PermissionRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_all(self) -> list[AppPermission]:
        stmt = select(AppPermission).order_by(AppPermission.permission_id)
        return list((await self.db.execute(stmt)).scalars().all())

    async def list_ids(self) -> list[str]:
        stmt = select(AppPermission.permission_id).order_by(AppPermission.permission_id)
        return list((await self.db.execute(stmt)).scalars().all())

    async def find_existing(self, permission_ids: Iterable[str]) -> set[str]:
        wanted = set(permission_ids)
        if not wanted:
            return set()
        stmt = select(AppPermission.permission_id).where(AppPermission.permission_id.in_(wanted))
        return set((await self.db.execute(stmt)).scalars().all())

    async def insert_missing(self, entries: Mapping[str, str]) -> int:
        """
        Insert catalog entries that are not stored yet. Existing rows are
        left untouched. Returns the number of rows added.
        """
        existing = await self.find_existing(entries.keys())
        added = 0
        for permission_id, description in entries.items():
            if permission_id in existing:
                continue
            self.db.add(AppPermission(permission_id=permission_id, description=description))
            added += 1
        if added:
            await self.db.flush()
        return added
