"""
Recommendation repository.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from prepbank.db.models import RecommendationRow
from prepbank.schemas import Recommendation


def to_recommendation(row: RecommendationRow) -> Recommendation:
    return Recommendation(
        id=row.id,
        faculty_name=row.faculty_name,
        date=row.date,
        title=row.title,
        url=row.url,
        description=row.description,
        subject=row.subject,
        goal=row.goal,
        expected_learning=row.expected_learning,
        remarks=row.remarks,
        time_to_complete=row.time_to_complete,
    )


async def create_recommendation(db: AsyncSession, rec: Recommendation) -> Recommendation:
    """Insert a recommendation and return it with the store's id."""
    row = RecommendationRow(
        faculty_name=rec.faculty_name,
        date=rec.date,
        title=rec.title,
        url=rec.url,
        description=rec.description,
        subject=rec.subject.value,
        goal=rec.goal,
        expected_learning=rec.expected_learning,
        remarks=rec.remarks,
        time_to_complete=rec.time_to_complete,
    )
    db.add(row)
    await db.flush()
    return to_recommendation(row)


async def list_recommendations(
    db: AsyncSession,
    *,
    subject: str | None = None,
) -> list[Recommendation]:
    stmt = select(RecommendationRow).order_by(RecommendationRow.created_at.desc())
    if subject is not None:
        stmt = stmt.where(RecommendationRow.subject == subject)
    result = await db.execute(stmt)
    return [to_recommendation(r) for r in result.scalars().all()]
