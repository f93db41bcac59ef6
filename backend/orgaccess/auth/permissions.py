from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping


@dataclass(frozen=True)
class Permission:
    # org:*
    ORG_READ: str = "org:read"
    ORG_EDIT: str = "org:edit"
    ORG_DELETE: str = "org:delete"

    # departments:*
    DEPARTMENTS_CREATE: str = "departments:create"
    DEPARTMENTS_EDIT: str = "departments:edit"
    DEPARTMENTS_DELETE: str = "departments:delete"

    # job-posts:*
    JOB_POSTS_CREATE: str = "job-posts:create"
    JOB_POSTS_EDIT: str = "job-posts:edit"
    JOB_POSTS_DELETE: str = "job-posts:delete"
    JOB_POSTS_PUBLISH: str = "job-posts:publish"

    # members:*
    MEMBERS_INVITE: str = "members:invite"
    MEMBERS_REMOVE: str = "members:remove"
    MEMBERS_READ: str = "members:read"

    # roles:*
    ROLES_CREATE: str = "roles:create"
    ROLES_EDIT: str = "roles:edit"
    ROLES_DELETE: str = "roles:delete"
    ROLES_ASSIGN: str = "roles:assign"


PERM = Permission()

# Seeded into app_permissions once at startup. Identifiers are flat
# "<resource>:<action>" strings; there is no wildcard or hierarchy.
PERMISSION_DESCRIPTIONS: Mapping[str, str] = {
    PERM.ORG_READ: "Read organization details",
    PERM.ORG_EDIT: "Edit organization settings",
    PERM.ORG_DELETE: "Delete organization",
    PERM.DEPARTMENTS_CREATE: "Create departments",
    PERM.DEPARTMENTS_EDIT: "Edit departments",
    PERM.DEPARTMENTS_DELETE: "Delete departments",
    PERM.JOB_POSTS_CREATE: "Create job posts",
    PERM.JOB_POSTS_EDIT: "Edit job posts",
    PERM.JOB_POSTS_DELETE: "Delete job posts",
    PERM.JOB_POSTS_PUBLISH: "Publish job posts",
    PERM.MEMBERS_INVITE: "Invite members to the organization",
    PERM.MEMBERS_REMOVE: "Remove members from the organization",
    PERM.MEMBERS_READ: "View organization members",
    PERM.ROLES_CREATE: "Create custom roles for the organization",
    PERM.ROLES_EDIT: "Edit custom roles for the organization (name, permissions)",
    PERM.ROLES_DELETE: "Delete custom roles for the organization",
    PERM.ROLES_ASSIGN: "Assign roles to organization members",
}


def is_well_formed(permission_id: str) -> bool:
    resource, sep, action = (permission_id or "").partition(":")
    return bool(sep and resource and action and ":" not in action)
