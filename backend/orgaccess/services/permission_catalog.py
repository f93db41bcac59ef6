"""
Permission catalog.

The set of permission identifiers is fixed in code (auth/permissions.py) and
mirrored into the app_permissions table so role-permission rows can reference
it. Nothing at runtime adds, edits, or removes catalog entries.
"""

from __future__ import annotations

from typing import Iterable, Mapping

import structlog

from orgaccess.auth.permissions import PERMISSION_DESCRIPTIONS, is_well_formed
from orgaccess.core.errors import ValidationError
from orgaccess.crud.permissions import PermissionRepository
from orgaccess.models.permission import AppPermission

logger = structlog.get_logger(__name__)


class PermissionCatalog:
    def __init__(
        self,
        permissions: PermissionRepository,
        definitions: Mapping[str, str] = PERMISSION_DESCRIPTIONS,
    ):
        self.permissions = permissions
        self.definitions = definitions

    async def seed(self) -> int:
        """
        Idempotently store the static catalog. Safe to run on every startup.
        Caller owns the commit.
        """
        malformed = sorted(p for p in self.definitions if not is_well_formed(p))
        if malformed:
            raise ValueError(f"Malformed permission ids in catalog: {malformed}")

        added = await self.permissions.insert_missing(self.definitions)
        if added:
            logger.info("permission_catalog_seeded", added=added, total=len(self.definitions))
        return added

    async def list(self) -> list[AppPermission]:
        return await self.permissions.list_all()

    async def snapshot(self) -> frozenset[str]:
        """Current catalog ids, copied. Later catalog changes do not leak into it."""
        return frozenset(await self.permissions.list_ids())

    async def validate(self, permission_ids: Iterable[str]) -> list[str]:
        """
        Return the de-duplicated ids if every one exists in the catalog,
        otherwise raise ValidationError naming the unknown ones.
        """
        requested = list(dict.fromkeys(permission_ids))
        if not requested:
            return []

        found = await self.permissions.find_existing(requested)
        unknown = [pid for pid in requested if pid not in found]
        if unknown:
            raise ValidationError(
                f"Invalid permission IDs provided: {', '.join(unknown)}.",
                context={"unknown": unknown},
            )
        return requested
