from __future__ import annotations

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from orgaccess.core.errors import InternalError, OrgAccessError

logger = structlog.get_logger(__name__)


class UnitOfWork:
    """
    One logical transaction over a request-scoped AsyncSession.

        async with uow:
            ...  # repositories flush through uow.db

    Only the outermost block commits, so an operation can call another
    operation's building blocks without committing halfway. Any exception
    rolls the whole thing back. IntegrityError is re-raised as is so callers
    can map constraint violations to conflicts; other SQLAlchemy errors are
    wrapped in InternalError so storage details never reach the API layer.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self._depth = 0

    @property
    def active(self) -> bool:
        return self._depth > 0

    async def __aenter__(self) -> "UnitOfWork":
        self._depth += 1
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        self._depth -= 1
        if self._depth > 0:
            return False

        if exc is None:
            try:
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                raise
            except SQLAlchemyError as commit_exc:
                await self.db.rollback()
                logger.error("uow_commit_failed", error=str(commit_exc))
                raise InternalError("Failed to persist changes.") from commit_exc
            return False

        await self.db.rollback()
        if isinstance(exc, (OrgAccessError, IntegrityError)):
            return False
        if isinstance(exc, SQLAlchemyError):
            logger.error("uow_storage_error", error=str(exc))
            raise InternalError("Storage failure.") from exc
        return False
