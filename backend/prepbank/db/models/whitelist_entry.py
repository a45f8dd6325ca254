"""
WhitelistEntryRow — users granted a role on the portal.

Roles:
    admin    — manages questions, resources, companies and the whitelist
    faculty  — publishes recommendations
    student  — read-only (also the role of anyone not on the whitelist)
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from prepbank.db.models.base import Base, generate_id, utcnow


class WhitelistEntryRow(Base):
    __tablename__ = "user_roles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    email: Mapped[str] = mapped_column(
        String(320), unique=True, nullable=False, index=True
    )
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default="student"
    )  # admin | faculty | student
    auth_provider: Mapped[str] = mapped_column(
        String(20), nullable=False, default="google"
    )
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<WhitelistEntryRow {self.email} role={self.role} provider={self.auth_provider}>"
