"""
Whitelist repository — the persisted list of users granted a role.

Repository rules:
- Pure data-access logic only
- Every function receives AsyncSession explicitly
- Functions flush, but never commit
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from prepbank.db.models import WhitelistEntryRow
from prepbank.schemas import WhitelistEntry


def to_entry(row: WhitelistEntryRow) -> WhitelistEntry:
    return WhitelistEntry(
        id=row.id,
        email=row.email,
        role=row.role,
        auth_provider=row.auth_provider,
        name=row.name,
    )


async def get_entry_by_email(db: AsyncSession, email: str) -> WhitelistEntry | None:
    """Fetch a whitelist entry by email address (case-insensitive)."""
    stmt = select(WhitelistEntryRow).where(WhitelistEntryRow.email == email.lower().strip())
    result = await db.execute(stmt)
    row = result.scalar_one_or_none()
    return to_entry(row) if row else None


async def upsert_entry(db: AsyncSession, entry: WhitelistEntry) -> WhitelistEntry:
    """Insert an entry, or update role/provider/name of the existing one for that email."""
    email = entry.email.lower().strip()
    stmt = select(WhitelistEntryRow).where(WhitelistEntryRow.email == email)
    result = await db.execute(stmt)
    row = result.scalar_one_or_none()

    if row is None:
        row = WhitelistEntryRow(email=email)
        db.add(row)

    row.role = entry.role.value
    row.auth_provider = entry.auth_provider.value
    if entry.name:
        row.name = entry.name.strip()

    await db.flush()
    return to_entry(row)


async def list_entries(
    db: AsyncSession,
    *,
    role: str | None = None,
) -> list[WhitelistEntry]:
    """List entries ordered by email, optionally filtered by role."""
    stmt = select(WhitelistEntryRow).order_by(WhitelistEntryRow.email)
    if role is not None:
        stmt = stmt.where(WhitelistEntryRow.role == role.lower())
    result = await db.execute(stmt)
    return [to_entry(r) for r in result.scalars().all()]


async def delete_entry(db: AsyncSession, email: str) -> bool:
    """Remove an email from the whitelist.  Returns True if a row was deleted."""
    stmt = select(WhitelistEntryRow).where(WhitelistEntryRow.email == email.lower().strip())
    result = await db.execute(stmt)
    row = result.scalar_one_or_none()
    if row is None:
        return False
    await db.delete(row)
    await db.flush()
    return True
