# Import models here so Alembic can discover metadata.
from orgaccess.models.organization import Organization  # noqa: F401
from orgaccess.models.permission import AppPermission  # noqa: F401
from orgaccess.models.role import Role, RolePermission  # noqa: F401
from orgaccess.models.member import Member  # noqa: F401
from orgaccess.models.invitation import Invitation  # noqa: F401
