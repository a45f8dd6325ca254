"""Domain record schemas produced and consumed by the upload pipeline."""

from __future__ import annotations

from pydantic import BaseModel, Field

from prepbank.core.constants import (
    AuthProvider,
    Difficulty,
    RecommendationSubject,
    Topic,
    UserRole,
)


class Company(BaseModel):
    """A recruiting company.  `id` is empty until the store assigns one."""

    id: str = ""
    name: str = Field(..., min_length=1)
    sector: str = "General"
    logo: str = ""
    description: str = ""
    roles: list[str] = Field(default_factory=list)


class Question(BaseModel):
    """An interview question, denormalised with its company name for display."""

    id: str
    company_id: str
    company_name: str
    domain: str = "General"
    role: str = "General"
    topic: Topic = Topic.GENERAL
    difficulty: Difficulty = Difficulty.MEDIUM
    text: str = Field(..., min_length=1)
    ideal_approach: str = ""
    asked_in_bits: bool = False
    frequency: int = 1


class Resource(BaseModel):
    """A learning resource."""

    id: str
    title: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)
    description: str = ""
    category: str = "General"
    source: str = "External"
    duration: str | None = "Self-paced"


class Recommendation(BaseModel):
    """A faculty recommendation."""

    id: str
    faculty_name: str
    date: str
    title: str = Field(..., min_length=1)
    url: str | None = None
    description: str = ""
    subject: RecommendationSubject = RecommendationSubject.PYTHON
    goal: str = ""
    expected_learning: str = ""
    remarks: str | None = None
    time_to_complete: str | None = None


class WhitelistEntry(BaseModel):
    """A whitelisted user and the role they are granted."""

    id: str = ""
    email: str = Field(..., min_length=3, max_length=320)
    role: UserRole
    auth_provider: AuthProvider = AuthProvider.GOOGLE
    name: str | None = None
