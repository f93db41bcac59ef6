# backend/orgaccess/core/errors.py

from __future__ import annotations

from typing import Any, Optional

from fastapi import status


class OrgAccessError(Exception):
    """
    Base class for every error the engine raises.

    Each subclass pins an HTTP status so the API layer can map errors
    deterministically without inspecting messages.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, *, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_detail(self) -> dict[str, Any]:
        return {"error": self.code, "message": self.message}


class NotFoundError(OrgAccessError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class ConflictError(OrgAccessError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"


class ForbiddenError(OrgAccessError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"


class ValidationError(OrgAccessError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"


class GoneError(OrgAccessError):
    status_code = status.HTTP_410_GONE
    code = "GONE"


class InternalError(OrgAccessError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "INTERNAL_ERROR"
