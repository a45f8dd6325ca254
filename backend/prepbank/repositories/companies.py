"""
Company repository containing all data-access operations for the companies table.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from prepbank.db.models import CompanyRow
from prepbank.schemas import Company


def to_company(row: CompanyRow) -> Company:
    return Company(
        id=row.id,
        name=row.name,
        sector=row.sector,
        logo=row.logo,
        description=row.description,
        roles=list(row.roles or []),
    )


async def create_company(db: AsyncSession, draft: Company) -> Company:
    """Insert a company and return it with its assigned id.  Any draft id is ignored."""
    row = CompanyRow(
        name=draft.name.strip(),
        sector=draft.sector,
        logo=draft.logo,
        description=draft.description,
        roles=list(draft.roles),
    )
    db.add(row)
    await db.flush()
    return to_company(row)


async def get_company_by_name(db: AsyncSession, name: str) -> Company | None:
    """Fetch a company by exact (case-sensitive) name."""
    stmt = select(CompanyRow).where(CompanyRow.name == name)
    result = await db.execute(stmt)
    row = result.scalar_one_or_none()
    return to_company(row) if row else None


async def list_companies(db: AsyncSession) -> list[Company]:
    """All companies, alphabetically."""
    result = await db.execute(select(CompanyRow).order_by(CompanyRow.name))
    return [to_company(r) for r in result.scalars().all()]
