"""
Question repository.

Questions are upserted on (text, company_id): uploading the same
question for the same company again refreshes its details.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from prepbank.db.models import CompanyRow, QuestionRow
from prepbank.schemas import Question

UPDATABLE_FIELDS = (
    "domain", "role", "topic", "difficulty",
    "ideal_approach", "asked_in_bits",
)


def to_question(row: QuestionRow, company_name: str) -> Question:
    return Question(
        id=row.id,
        company_id=row.company_id,
        company_name=company_name,
        domain=row.domain,
        role=row.role,
        topic=row.topic,
        difficulty=row.difficulty,
        text=row.text,
        ideal_approach=row.ideal_approach,
        asked_in_bits=row.asked_in_bits,
        frequency=row.frequency,
    )


async def upsert_question(db: AsyncSession, question: Question) -> Question:
    """Insert a question, or update the existing one with the same text and company."""
    stmt = select(QuestionRow).where(
        QuestionRow.text == question.text,
        QuestionRow.company_id == question.company_id,
    )
    result = await db.execute(stmt)
    row = result.scalar_one_or_none()

    values = {
        "domain": question.domain,
        "role": question.role,
        "topic": question.topic.value,
        "difficulty": question.difficulty.value,
        "ideal_approach": question.ideal_approach,
        "asked_in_bits": question.asked_in_bits,
    }

    if row is None:
        row = QuestionRow(
            company_id=question.company_id,
            text=question.text,
            frequency=question.frequency,
            **values,
        )
        db.add(row)
    else:
        for key in UPDATABLE_FIELDS:
            setattr(row, key, values[key])

    await db.flush()
    return to_question(row, question.company_name)


async def list_questions(
    db: AsyncSession,
    *,
    company_id: str | None = None,
    offset: int = 0,
    limit: int = 50,
) -> list[Question]:
    """List questions newest first, optionally for one company."""
    stmt = (
        select(QuestionRow, CompanyRow.name)
        .join(CompanyRow, CompanyRow.id == QuestionRow.company_id)
        .order_by(QuestionRow.created_at.desc())
    )
    if company_id is not None:
        stmt = stmt.where(QuestionRow.company_id == company_id)
    stmt = stmt.offset(offset).limit(limit)
    result = await db.execute(stmt)
    return [to_question(row, name) for row, name in result.all()]
