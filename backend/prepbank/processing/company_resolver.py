"""
Company resolution for question uploads.

Every distinct company named in the file is resolved exactly once,
before any question row is materialised: an existing company with the
same (case-sensitive) name is reused as-is, otherwise a new one is
drafted from the first row that names it and created through the
injected callback.  Creations run one at a time so a name is never
created twice and each failure is attributed to its own name.
"""

from __future__ import annotations

import asyncio
import inspect
import re
from dataclasses import dataclass, field
from typing import Any, Callable

from prepbank.core.logging import get_logger
from prepbank.pipeline.errors import ReferenceResolutionError
from prepbank.processing.columns import RowView
from prepbank.schemas import Company

logger = get_logger(__name__)

DEFAULT_SECTOR = "General"


@dataclass
class CompanyResolution:
    """Result of one resolution pass.  Owned by a single upload."""

    companies: dict[str, Company] = field(default_factory=dict)
    failures: dict[str, str] = field(default_factory=dict)
    created: list[str] = field(default_factory=list)
    reused: list[str] = field(default_factory=list)


def logo_url(name: str, template: str) -> str:
    """Derive a logo URL from a company name (lower-cased, whitespace removed)."""
    slug = re.sub(r"\s", "", name.lower())
    return template.format(slug=slug)


def distinct_company_names(views: list[RowView]) -> list[str]:
    """Non-blank company names in order of first appearance."""
    seen: dict[str, None] = {}
    for view in views:
        name = view.get("company_name")
        if name:
            seen.setdefault(name, None)
    return list(seen)


def draft_company(
    name: str,
    first_row: RowView,
    *,
    logo_template: str,
    description: str,
) -> Company:
    """Build an unsaved Company from the first row that references `name`."""
    role = first_row.get("role")
    return Company(
        id="",
        name=name,
        sector=first_row.get("domain") or DEFAULT_SECTOR,
        logo=logo_url(name, logo_template),
        description=description,
        roles=[role] if role else [],
    )


async def _invoke(fn: Callable[[Company], Any], draft: Company) -> Any:
    result = fn(draft)
    if inspect.isawaitable(result):
        result = await result
    return result


async def create_company(
    create: Callable[[Company], Any],
    draft: Company,
    *,
    timeout: float | None = None,
) -> Company:
    """
    Create one company through the callback and return it with its id.

    Raises:
        ReferenceResolutionError: The callback returned nothing, returned a
            company without an id or a dict that is not a valid company,
            raised, or did not finish within `timeout`.
    """
    name = draft.name
    try:
        if timeout and timeout > 0:
            saved = await asyncio.wait_for(_invoke(create, draft), timeout=timeout)
        else:
            saved = await _invoke(create, draft)
        if isinstance(saved, dict):
            saved = Company.model_validate(saved)
    except asyncio.TimeoutError as exc:
        raise ReferenceResolutionError(
            f"Timed out creating company {name} after {timeout:g}s",
            company_name=name,
        ) from exc
    except Exception as exc:
        raise ReferenceResolutionError(
            f"Error creating company {name}: {exc}",
            company_name=name,
        ) from exc

    if saved is None or not getattr(saved, "id", ""):
        raise ReferenceResolutionError(
            f"Failed to create company: {name}",
            company_name=name,
        )
    return saved


async def resolve_companies(
    views: list[RowView],
    known_companies: list[Company],
    create: Callable[[Company], Any],
    *,
    logo_template: str,
    description: str,
    timeout: float | None = None,
) -> CompanyResolution:
    """
    Resolve every company named in `views` to a saved Company.

    Names that could not be resolved are recorded in `failures` and left
    out of `companies`, so dependent rows fail at materialisation.
    """
    resolution = CompanyResolution()
    known = {c.name: c for c in known_companies}

    for name in distinct_company_names(views):
        existing = known.get(name)
        if existing is not None:
            resolution.companies[name] = existing
            resolution.reused.append(name)
            continue

        first_row = next(v for v in views if v.get("company_name") == name)
        draft = draft_company(
            name,
            first_row,
            logo_template=logo_template,
            description=description,
        )

        try:
            saved = await create_company(create, draft, timeout=timeout)
        except ReferenceResolutionError as exc:
            logger.warning("Company creation failed", company=name, error=str(exc))
            resolution.failures[name] = str(exc)
            continue

        resolution.companies[name] = saved
        resolution.created.append(name)
        logger.info("Company created", company=name, company_id=saved.id)

    return resolution
