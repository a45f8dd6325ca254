"""
Resource repository.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from prepbank.db.models import ResourceRow
from prepbank.schemas import Resource


def to_resource(row: ResourceRow) -> Resource:
    return Resource(
        id=row.id,
        title=row.title,
        url=row.url,
        description=row.description,
        category=row.category,
        source=row.source,
        duration=row.duration,
    )


async def create_resource(db: AsyncSession, resource: Resource) -> Resource:
    """Insert a resource.  The locally synthesised id is replaced by the store's."""
    row = ResourceRow(
        title=resource.title,
        url=resource.url,
        description=resource.description,
        category=resource.category,
        source=resource.source,
        duration=resource.duration,
    )
    db.add(row)
    await db.flush()
    return to_resource(row)


async def list_resources(
    db: AsyncSession,
    *,
    category: str | None = None,
) -> list[Resource]:
    stmt = select(ResourceRow).order_by(ResourceRow.created_at.desc())
    if category is not None:
        stmt = stmt.where(ResourceRow.category == category)
    result = await db.execute(stmt)
    return [to_resource(r) for r in result.scalars().all()]
