# backend/orgaccess/core/roles.py

import enum


class SystemRole(str, enum.Enum):
    OWNER = "Owner"    # creator / receives the whole permission catalog
    MEMBER = "Member"  # default role, no permissions until granted
