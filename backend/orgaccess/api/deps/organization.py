from fastapi import Depends, Path

from orgaccess.api.deps.services import get_services
from orgaccess.models.organization import Organization
from orgaccess.services.container import AccessServices


async def get_current_organization(
    handle: str = Path(..., description="Organization handle"),
    services: AccessServices = Depends(get_services),
) -> Organization:
    """
    Resolve the organization named in the URL. Membership is not checked
    here; gated routes do that through require_permission.
    """
    return await services.organizations.get_by_handle(handle)
