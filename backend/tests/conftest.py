"""
Shared fixtures for the prepbank test suite.
"""

from __future__ import annotations

import itertools
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from prepbank.db.session import init_models, make_session_factory
from prepbank.pipeline.collaborators import UploadCollaborators
from prepbank.schemas import Company

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

QUESTION_HEADER = "Company,Domain,Role,Topic,Difficulty,Question,Ideal_Approach,Asked_In_BITS"


# ============================================================================
# Fake collaborators
# ============================================================================

class FakeStore:
    """In-memory record store that records every creation call."""

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self.company_calls: list[Company] = []
        self.companies: list[Company] = []
        self.questions: list = []
        self.resources: list = []
        self.recommendations: list = []
        self.whitelist: list = []

    async def create_company(self, draft: Company) -> Company:
        self.company_calls.append(draft)
        saved = draft.model_copy(update={"id": f"c{next(self._ids)}"})
        self.companies.append(saved)
        return saved

    async def create_question(self, question) -> None:
        self.questions.append(question)

    def create_resource(self, resource) -> None:
        self.resources.append(resource)

    async def create_recommendation(self, rec) -> None:
        self.recommendations.append(rec)

    def create_whitelist_entry(self, entry) -> None:
        self.whitelist.append(entry)

    def collaborators(self) -> UploadCollaborators:
        return UploadCollaborators(
            create_company=self.create_company,
            create_question=self.create_question,
            create_resource=self.create_resource,
            create_recommendation=self.create_recommendation,
            create_whitelist_entry=self.create_whitelist_entry,
        )


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def collaborators(store: FakeStore) -> UploadCollaborators:
    return store.collaborators()


# ============================================================================
# Database
# ============================================================================

@pytest_asyncio.fixture
async def db_engine() -> AsyncIterator[AsyncEngine]:
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_models(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return make_session_factory(db_engine)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session
        await session.rollback()
