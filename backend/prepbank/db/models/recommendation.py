"""
RecommendationRow — faculty recommendations, filed by course subject.
"""

from __future__ import annotations

from sqlalchemy import Column, DateTime, String, Text

from prepbank.db.models.base import Base, generate_id, utcnow


class RecommendationRow(Base):
    """One row per faculty recommendation."""

    __tablename__ = "recommendations"

    id = Column(String(36), primary_key=True, default=generate_id)
    faculty_name = Column(String(255), nullable=False)
    date = Column(String(32), nullable=False)

    # ── Content ───────────────────────────────
    title = Column(String(500), nullable=False)
    url = Column(String(2000), nullable=True)
    description = Column(Text, nullable=False, default="")
    subject = Column(String(100), nullable=False, index=True)

    # ── Pedagogy ──────────────────────────────
    goal = Column(Text, nullable=False, default="")
    expected_learning = Column(Text, nullable=False, default="")
    remarks = Column(Text, nullable=True)
    time_to_complete = Column(String(100), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<RecommendationRow id={self.id} {self.title!r} subject={self.subject}>"
