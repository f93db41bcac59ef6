# backend/orgaccess/models/permission.py

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from orgaccess.db.base import Base


class AppPermission(Base):
    """Global catalog entry. Seeded at startup, never edited at runtime."""

    __tablename__ = "app_permissions"

    permission_id: Mapped[str] = mapped_column(String(100), primary_key=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
