from typing import List

from fastapi import APIRouter, Depends

from orgaccess.api.deps.auth import get_current_user
from orgaccess.api.deps.services import get_services
from orgaccess.schemas.permission import AppPermissionOut
from orgaccess.services.container import AccessServices

router = APIRouter(prefix="/app-permissions", tags=["permissions"])


@router.get("", response_model=List[AppPermissionOut])
async def list_app_permissions(
    _user=Depends(get_current_user),
    services: AccessServices = Depends(get_services),
):
    return await services.catalog.list()
