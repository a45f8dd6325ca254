"""
CompanyRow — recruiting companies.

`name` is the natural key: bulk uploads look companies up by exact name.
"""

from datetime import datetime

from sqlalchemy import JSON, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from prepbank.db.models.base import Base, generate_id, utcnow


class CompanyRow(Base):
    __tablename__ = "companies"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    sector: Mapped[str] = mapped_column(String(255), nullable=False, default="General")
    logo: Mapped[str] = mapped_column(String(1000), nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    roles: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    questions = relationship("QuestionRow", back_populates="company")

    def __repr__(self) -> str:
        return f"<CompanyRow id={self.id} {self.name!r} sector={self.sector}>"
