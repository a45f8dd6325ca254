"""
ResourceRow — learning resources (courses, articles, videos).
"""

from __future__ import annotations

from sqlalchemy import Column, DateTime, String, Text

from prepbank.db.models.base import Base, generate_id, utcnow


class ResourceRow(Base):
    """One row per learning resource."""

    __tablename__ = "resources"

    id = Column(String(36), primary_key=True, default=generate_id)
    title = Column(String(500), nullable=False)
    url = Column(String(2000), nullable=False)
    description = Column(Text, nullable=False, default="")
    category = Column(String(100), nullable=False, default="General", index=True)
    source = Column(String(255), nullable=False, default="External")
    duration = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<ResourceRow id={self.id} {self.title!r} category={self.category}>"
