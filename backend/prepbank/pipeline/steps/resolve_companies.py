"""
ResolveCompaniesStep — resolves company references for question uploads.

Runs to completion before any row is materialised, so the materializer
only needs a dictionary lookup per row.
"""

from __future__ import annotations

from prepbank.core.config import settings
from prepbank.core.constants import Progress
from prepbank.core.logging import get_logger
from prepbank.pipeline.context import StepResult, UploadContext
from prepbank.pipeline.errors import StepExecutionError
from prepbank.pipeline.step import PipelineStep
from prepbank.processing.company_resolver import resolve_companies

logger = get_logger(__name__)


class ResolveCompaniesStep(PipelineStep):
    """Reuse or create every company referenced by the file."""

    name = "resolve_companies"
    description = "Resolve referenced companies"

    async def execute(self, ctx: UploadContext) -> StepResult:
        started_at = self._now()

        if ctx.collaborators.create_company is None:
            raise StepExecutionError(
                "No create_company callback configured",
                upload_id=ctx.upload_id,
                step_name=self.name,
            )

        timeout = (
            ctx.resolver_timeout
            if ctx.resolver_timeout is not None
            else settings.RESOLVER_TIMEOUT_SECONDS
        )

        resolution = await resolve_companies(
            ctx.views(),
            ctx.known_companies,
            ctx.collaborators.create_company,
            logo_template=settings.LOGO_URL_TEMPLATE,
            description=settings.BULK_COMPANY_DESCRIPTION,
            timeout=timeout,
        )

        ctx.resolved_companies = resolution.companies
        ctx.company_failures = resolution.failures
        ctx.report.errors.extend(resolution.failures.values())
        ctx.set_progress(Progress.RESOLVED)

        logger.info(
            "Company resolution complete",
            reused=len(resolution.reused),
            created=len(resolution.created),
            failed=len(resolution.failures),
        )

        return self._success(started_at, metadata={
            "reused": resolution.reused,
            "created": resolution.created,
            "failed": list(resolution.failures),
        })
