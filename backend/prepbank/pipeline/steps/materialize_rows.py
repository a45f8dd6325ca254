"""
MaterializeRowsStep — converts every data row into a record and hands it
to the kind's creation callback, accumulating the upload report.

Row failures are independent: each is counted and reported with its
line number, and the loop moves on.  Callbacks that return an awaitable
are dispatched without blocking the next row; the dispatched work is
drained at the end of the step and its failures become report warnings.
"""

from __future__ import annotations

import asyncio
import inspect
from datetime import date

from prepbank.core.config import settings
from prepbank.core.constants import UploadKind
from prepbank.core.logging import get_logger
from prepbank.pipeline.context import StepResult, UploadContext
from prepbank.pipeline.errors import RowError
from prepbank.pipeline.step import PipelineStep
from prepbank.processing.materializers import (
    QuestionMaterializer,
    RecommendationMaterializer,
    ResourceMaterializer,
    RowMaterializer,
    WhitelistMaterializer,
)

logger = get_logger(__name__)

# Line 1 is the header.
FIRST_DATA_LINE = 2


def materializer_for(ctx: UploadContext) -> RowMaterializer:
    """Build the materializer for the context's upload kind."""
    common = {
        "batch_stamp_ms": ctx.batch_stamp_ms,
        "strict_enums": ctx.strict_enums,
    }
    if ctx.kind == UploadKind.QUESTION:
        return QuestionMaterializer(ctx.resolved_companies, **common)
    if ctx.kind == UploadKind.RESOURCE:
        return ResourceMaterializer(**common)
    if ctx.kind == UploadKind.RECOMMENDATION:
        return RecommendationMaterializer(
            faculty_name=ctx.faculty_name or settings.DEFAULT_FACULTY_NAME,
            upload_date=date.today(),
            **common,
        )
    return WhitelistMaterializer(
        institution_domain=settings.INSTITUTION_EMAIL_DOMAIN,
        **common,
    )


class MaterializeRowsStep(PipelineStep):
    """Build and dispatch one record per data row."""

    name = "materialize_rows"
    description = "Materialize rows and dispatch record creation"

    async def execute(self, ctx: UploadContext) -> StepResult:
        started_at = self._now()

        create = ctx.collaborators.creator_for(ctx.kind)
        materializer = materializer_for(ctx)
        min_fields = ctx.schema.min_fields
        report = ctx.report
        skipped_blank = 0

        for index, view in enumerate(ctx.views()):
            line = index + FIRST_DATA_LINE

            if not any(view.row):
                skipped_blank += 1
                continue

            if len(view) < min_fields:
                report.failed_count += 1
                report.errors.append(
                    f"Line {line}: Not enough fields (found {len(view)}, expected min {min_fields})."
                )
                continue

            try:
                record = materializer.materialize(view, index)
                result = create(record)
            except RowError as exc:
                report.failed_count += 1
                report.errors.append(f"Line {line}: {exc}")
                continue
            except Exception as exc:
                logger.warning("Creation callback raised", line=line, error=str(exc))
                report.failed_count += 1
                report.errors.append(f"Line {line}: {exc}")
                continue

            if inspect.isawaitable(result):
                ctx.pending.append((line, asyncio.ensure_future(result)))

            ctx.records.append(record)
            report.success_count += 1

        await self._drain_pending(ctx)

        logger.info(
            "Rows materialized",
            success=report.success_count,
            failed=report.failed_count,
            skipped_blank=skipped_blank,
            dispatched=len(ctx.pending),
            warnings=len(report.warnings),
        )

        return self._success(started_at, metadata={
            "success": report.success_count,
            "failed": report.failed_count,
            "skipped_blank": skipped_blank,
            "dispatched": len(ctx.pending),
        })

    async def _drain_pending(self, ctx: UploadContext) -> None:
        """Wait for dispatched creations; failures become warnings, counters stay."""
        if not ctx.pending:
            return

        outcomes = await asyncio.gather(
            *(future for _, future in ctx.pending),
            return_exceptions=True,
        )
        for (line, _), outcome in zip(ctx.pending, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning("Dispatched creation failed", line=line, error=str(outcome))
                ctx.report.warnings.append(f"Line {line}: Saving the record failed: {outcome}")
