"""
SqlCollaborators — UploadCollaborators backed by the SQL repositories.

Each creation runs in its own short transaction, so a failed row never
rolls back rows that were already saved.  Writes are bounded by a
semaphore because row creations are dispatched concurrently.

Questions and whitelist entries are upserts.  Two rows with the same key
can race to insert; the loser hits the unique constraint and is retried
once, which then finds the winner's row and updates it.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from prepbank.core.config import settings
from prepbank.core.logging import get_logger
from prepbank.db.session import session_scope
from prepbank.pipeline.collaborators import UploadCollaborators
from prepbank.repositories import companies, questions, recommendations, resources, whitelist
from prepbank.schemas import (
    Company,
    Question,
    Recommendation,
    Resource,
    WhitelistEntry,
)

logger = get_logger(__name__)


class SqlCollaborators:
    """Persist upload records through the repositories."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        max_concurrent_writes: int | None = None,
    ) -> None:
        self.session_factory = session_factory
        self._write_slots = asyncio.Semaphore(
            max_concurrent_writes or settings.DB_MAX_CONCURRENT_WRITES
        )

    async def load_known_companies(self) -> list[Company]:
        async with session_scope(self.session_factory) as db:
            return await companies.list_companies(db)

    async def create_company(self, draft: Company) -> Company | None:
        async with self._write_slots, session_scope(self.session_factory) as db:
            saved = await companies.create_company(db, draft)
        logger.debug("Company saved", company=saved.name, company_id=saved.id)
        return saved

    async def _upsert(
        self,
        write: Callable[[AsyncSession, Any], Awaitable[Any]],
        record: Any,
        key: str,
    ) -> Any:
        async with self._write_slots:
            try:
                async with session_scope(self.session_factory) as db:
                    return await write(db, record)
            except IntegrityError:
                logger.info("Concurrent insert lost, retrying as update", key=key)
                async with session_scope(self.session_factory) as db:
                    return await write(db, record)

    async def create_question(self, question: Question) -> Question:
        return await self._upsert(
            questions.upsert_question, question, f"{question.company_id}:{question.text[:40]}",
        )

    async def create_resource(self, resource: Resource) -> Resource:
        async with self._write_slots, session_scope(self.session_factory) as db:
            return await resources.create_resource(db, resource)

    async def create_recommendation(self, rec: Recommendation) -> Recommendation:
        async with self._write_slots, session_scope(self.session_factory) as db:
            return await recommendations.create_recommendation(db, rec)

    async def create_whitelist_entry(self, entry: WhitelistEntry) -> WhitelistEntry:
        return await self._upsert(whitelist.upsert_entry, entry, entry.email)

    def as_collaborators(self) -> UploadCollaborators:
        return UploadCollaborators(
            create_company=self.create_company,
            create_question=self.create_question,
            create_resource=self.create_resource,
            create_recommendation=self.create_recommendation,
            create_whitelist_entry=self.create_whitelist_entry,
        )
