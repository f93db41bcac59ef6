from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from orgaccess.db.session import get_db
from orgaccess.services.container import AccessServices


async def get_services(db: AsyncSession = Depends(get_db)) -> AccessServices:
    return AccessServices.from_session(db)
