from __future__ import annotations

from fastapi import Depends

from orgaccess.core.security import AuthenticatedUser, bearer_scheme, decode_access_token


async def get_current_user(credentials=Depends(bearer_scheme)) -> AuthenticatedUser:
    """
    Dependency for protected endpoints.

    Identity comes entirely from the token; there is no local users table.
    """
    return decode_access_token(credentials.credentials)
