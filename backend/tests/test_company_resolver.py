"""
Tests for company resolution ahead of question materialisation.
"""

import asyncio

import pytest

from prepbank.pipeline.errors import ReferenceResolutionError
from prepbank.processing.columns import QUESTION_SCHEMA, RowView
from prepbank.processing.company_resolver import (
    create_company,
    distinct_company_names,
    logo_url,
    resolve_companies,
)
from prepbank.schemas import Company
from prepbank.validation.header_validator import resolve_columns

LOGO_TEMPLATE = "https://logo.clearbit.com/{slug}.com"
INDEX = resolve_columns(QUESTION_SCHEMA.headers, QUESTION_SCHEMA)


def views(*rows: list[str]) -> list[RowView]:
    return [RowView(row, INDEX) for row in rows]


def question_row(company: str, domain: str = "Tech", role: str = "SDE", text: str = "Q?") -> list[str]:
    return [company, domain, role, "General", "Easy", text, "", "No"]


async def resolve(rows, known, create, timeout=None):
    return await resolve_companies(
        rows, known, create,
        logo_template=LOGO_TEMPLATE,
        description="Added via Bulk Upload.",
        timeout=timeout,
    )


def test_logo_url_strips_whitespace_and_lowercases():
    assert logo_url("Goldman  Sachs", LOGO_TEMPLATE) == "https://logo.clearbit.com/goldmansachs.com"


def test_distinct_names_keep_first_appearance_order_and_skip_blanks():
    rows = views(question_row("Beta"), question_row(""), question_row("Acme"), question_row("Beta"))
    assert distinct_company_names(rows) == ["Beta", "Acme"]


async def test_known_company_is_reused_without_creation(store):
    acme = Company(id="c-acme", name="Acme")
    result = await resolve(views(question_row("Acme")), [acme], store.create_company)

    assert result.companies["Acme"] is acme
    assert result.reused == ["Acme"]
    assert store.company_calls == []


async def test_known_company_match_is_case_sensitive(store):
    result = await resolve(views(question_row("acme")), [Company(id="c1", name="Acme")], store.create_company)
    assert result.created == ["acme"]


async def test_new_company_created_once_from_first_row(store):
    rows = views(
        question_row("Acme", domain="Finance", role="Analyst"),
        question_row("Acme", domain="Tech", role="SDE"),
        question_row("Acme"),
    )
    result = await resolve(rows, [], store.create_company)

    assert len(store.company_calls) == 1
    draft = store.company_calls[0]
    assert draft.name == "Acme"
    assert draft.sector == "Finance"
    assert draft.roles == ["Analyst"]
    assert draft.logo == "https://logo.clearbit.com/acme.com"
    assert draft.description == "Added via Bulk Upload."
    assert result.companies["Acme"].id == "c1"


async def test_blank_domain_and_role_fall_back():
    drafts = []

    def create(draft):
        drafts.append(draft)
        return draft.model_copy(update={"id": "x"})

    await resolve(views(question_row("Acme", domain="", role="")), [], create)
    assert drafts[0].sector == "General"
    assert drafts[0].roles == []


async def test_callback_returning_none_is_a_failure():
    result = await resolve(views(question_row("Ghost")), [], lambda draft: None)
    assert result.failures == {"Ghost": "Failed to create company: Ghost"}
    assert "Ghost" not in result.companies


async def test_callback_error_is_attributed_to_its_name(store):
    async def create(draft):
        if draft.name == "Bad":
            raise RuntimeError("boom")
        return await store.create_company(draft)

    result = await resolve(views(question_row("Bad"), question_row("Good")), [], create)

    assert result.failures == {"Bad": "Error creating company Bad: boom"}
    assert list(result.companies) == ["Good"]


async def test_creation_timeout():
    async def slow(draft):
        await asyncio.sleep(1)
        return draft.model_copy(update={"id": "late"})

    with pytest.raises(ReferenceResolutionError) as exc_info:
        await create_company(slow, Company(name="Slow"), timeout=0.05)

    assert str(exc_info.value) == "Timed out creating company Slow after 0.05s"
    assert exc_info.value.company_name == "Slow"


async def test_company_without_id_is_a_failure():
    with pytest.raises(ReferenceResolutionError):
        await create_company(lambda draft: draft, Company(name="NoId"))


async def test_malformed_callback_result_fails_only_that_name():
    async def create(draft):
        if draft.name == "Acme":
            return {"id": "c1"}
        return {"id": "c2", "name": draft.name}

    result = await resolve(views(question_row("Acme"), question_row("Beta")), [], create)

    assert list(result.failures) == ["Acme"]
    assert result.failures["Acme"].startswith("Error creating company Acme:")
    assert result.companies["Beta"].id == "c2"
