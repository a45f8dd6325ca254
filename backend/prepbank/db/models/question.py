"""
QuestionRow — interview questions, one company each.

(text, company_id) is unique: re-uploading the same question for the
same company updates it instead of duplicating it.
"""

from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from prepbank.db.models.base import Base, generate_id, utcnow


class QuestionRow(Base):
    """One row per question."""

    __tablename__ = "questions"
    __table_args__ = (
        UniqueConstraint("text", "company_id", name="uq_questions_text_company"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    company_id = Column(String(36), ForeignKey("companies.id"), nullable=False, index=True)

    # ── Context ───────────────────────────────
    domain = Column(String(255), nullable=False, default="General")
    role = Column(String(255), nullable=False, default="General")
    topic = Column(String(100), nullable=False, default="General", index=True)
    difficulty = Column(String(20), nullable=False, default="Medium")

    # ── Content ───────────────────────────────
    text = Column(Text, nullable=False)
    ideal_approach = Column(Text, nullable=False, default="")
    asked_in_bits = Column(Boolean, nullable=False, default=False)
    frequency = Column(Integer, nullable=False, default=1)

    # ── Timestamps ────────────────────────────
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    company = relationship("CompanyRow", back_populates="questions")

    def __repr__(self) -> str:
        return f"<QuestionRow id={self.id} company_id={self.company_id} difficulty={self.difficulty}>"
