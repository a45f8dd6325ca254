"""
UploadEngine — the orchestrator that runs an upload's steps sequentially.

One call to run() builds a fresh UploadContext, asks FlowResolver for
the kind's steps and runs them in order.  Progress checkpoints are
advisory.  A failing step ends the upload with a file-level report, so
run() always returns a result and never raises.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import structlog

from prepbank.core.config import settings
from prepbank.core.constants import (
    FILE_ERROR_MESSAGE,
    PipelineStatus,
    Progress,
    StepStatus,
    UploadKind,
)
from prepbank.pipeline.collaborators import UploadCollaborators
from prepbank.pipeline.context import (
    ProgressCallback,
    StepResult,
    UploadContext,
    UploadSource,
)
from prepbank.pipeline.errors import FlowResolutionError, StepExecutionError
from prepbank.pipeline.flow_resolver import FlowResolver
from prepbank.pipeline.step import PipelineStep
from prepbank.schemas import Company, UploadReport


@dataclass
class UploadResult:
    """Final outcome of one upload invocation."""

    upload_id: str
    status: str                     # PipelineStatus value
    report: UploadReport
    started_at: datetime | None = None
    completed_at: datetime | None = None
    total_duration_ms: int = 0
    steps_completed: int = 0
    total_steps: int = 0
    step_results: list[dict[str, Any]] = field(default_factory=list)
    context_summary: dict[str, Any] = field(default_factory=dict)
    error: str | None = None


class UploadEngine:
    """
    Runs the step sequence for one upload against an UploadContext.

    Usage::

        engine = UploadEngine()
        result = await engine.run(
            UploadKind.QUESTION,
            Path("questions.csv"),
            collaborators=UploadCollaborators(
                create_company=store.create_company,
                create_question=store.create_question,
            ),
            known_companies=await store.list_companies(),
        )
        print(result.report)
    """

    def __init__(self, flow_resolver: FlowResolver | None = None) -> None:
        self.flow_resolver = flow_resolver or FlowResolver()
        self.logger = structlog.get_logger("pipeline.engine")

    async def run(
        self,
        kind: UploadKind | str,
        source: UploadSource,
        *,
        collaborators: UploadCollaborators | None = None,
        known_companies: list[Company] | None = None,
        faculty_name: str | None = None,
        filename: str | None = None,
        on_progress: ProgressCallback | None = None,
        strict_csv: bool | None = None,
        strict_enums: bool | None = None,
        resolver_timeout: float | None = None,
    ) -> UploadResult:
        """
        Full upload execution.

        Args:
            kind: Record kind the file holds.
            source: A `Path` to read, raw bytes, or the CSV text itself.
                A plain `str` is never opened as a file name.
            collaborators: Creation callbacks for the records produced.
            known_companies: Companies already in the store (question uploads).
            faculty_name: Fallback faculty name for recommendation rows.
            filename: Display name for logs (defaults to the path's name).
            on_progress: Called with advisory percentages.
            strict_csv / strict_enums / resolver_timeout: Override settings.
        """
        started_at = datetime.now(timezone.utc)

        try:
            steps = self.flow_resolver.resolve(kind)
        except FlowResolutionError as exc:
            self.logger.error("Flow resolution failed", kind=str(kind), error=str(exc))
            return UploadResult(
                upload_id="",
                status=PipelineStatus.FAILED,
                report=UploadReport.file_failure(str(exc)),
                started_at=started_at,
                completed_at=datetime.now(timezone.utc),
                error=f"Flow resolution failed: {exc}",
            )

        ctx = UploadContext(
            kind=UploadKind(kind),
            source=source,
            collaborators=collaborators or UploadCollaborators(),
            filename=filename or (source.name if isinstance(source, Path) else None),
            known_companies=list(known_companies or []),
            faculty_name=faculty_name,
            on_progress=on_progress,
            strict_csv=settings.STRICT_CSV if strict_csv is None else strict_csv,
            strict_enums=settings.STRICT_ENUMS if strict_enums is None else strict_enums,
            resolver_timeout=resolver_timeout,
        )

        log = self.logger.bind(upload_id=ctx.upload_id, kind=str(ctx.kind))
        log.info("Upload started", filename=ctx.filename)

        result = await self.run_steps(ctx, steps)
        result.started_at = started_at

        log.info(
            "Upload finished",
            status=result.status,
            success=result.report.success_count,
            failed=result.report.failed_count,
            warnings=len(result.report.warnings),
            duration_ms=result.total_duration_ms,
        )
        return result

    async def run_steps(
        self,
        ctx: UploadContext,
        steps: list[PipelineStep],
    ) -> UploadResult:
        """
        Run `steps` in order against an existing context.

        Skips flow resolution, so tests can drive a hand-built step list.
        """
        started_at = datetime.now(timezone.utc)
        log = self.logger.bind(upload_id=ctx.upload_id, total_steps=len(steps))

        status = PipelineStatus.RUNNING
        steps_completed = 0
        failure: str | None = None

        ctx.set_progress(Progress.READING)

        for index, step in enumerate(steps):
            step_log = log.bind(step_name=step.name, step_index=index + 1)

            if await step.should_skip(ctx):
                step_log.debug("Step skipped")
                ctx.step_results.append(StepResult(
                    step_name=step.name,
                    status=StepStatus.SKIPPED,
                    started_at=datetime.now(timezone.utc),
                    completed_at=datetime.now(timezone.utc),
                ))
                steps_completed += 1
                continue

            step_log.debug(f"Step {index + 1}/{len(steps)}: {step.description}")
            result = await self._execute(step, ctx, step_log)
            ctx.step_results.append(result)

            if result.status == StepStatus.COMPLETED:
                steps_completed += 1
                step_log.debug("Step completed", duration_ms=result.duration_ms)
                continue

            step_log.error("Step failed, upload stopping", error=result.error)
            ctx.add_error(f"Step '{step.name}' failed: {result.error}")
            failure = result.error
            status = PipelineStatus.FAILED
            ctx.report = UploadReport.file_failure(
                FILE_ERROR_MESSAGE if step.file_level
                else f"Upload could not be completed: {result.error}"
            )
            ctx.set_progress(Progress.RESET)
            break

        if status != PipelineStatus.FAILED:
            status = PipelineStatus.COMPLETED
            ctx.set_progress(Progress.COMPLETE)

        completed_at = datetime.now(timezone.utc)
        return UploadResult(
            upload_id=ctx.upload_id,
            status=status,
            report=ctx.report,
            started_at=started_at,
            completed_at=completed_at,
            total_duration_ms=int((completed_at - started_at).total_seconds() * 1000),
            steps_completed=steps_completed,
            total_steps=len(steps),
            step_results=[sr.to_dict() for sr in ctx.step_results],
            context_summary=ctx.to_summary_dict(),
            error=failure,
        )

    async def _execute(
        self,
        step: PipelineStep,
        ctx: UploadContext,
        log: structlog.BoundLogger,
    ) -> StepResult:
        """Execute a step, converting any exception into a failed StepResult."""
        try:
            return await step.execute(ctx)

        except StepExecutionError as exc:
            return StepResult(
                step_name=step.name,
                status=StepStatus.FAILED,
                started_at=datetime.now(timezone.utc),
                completed_at=datetime.now(timezone.utc),
                error=str(exc),
                metadata=exc.details,
            )

        except Exception as exc:
            log.exception("Unexpected error in step", error=str(exc))
            return StepResult(
                step_name=step.name,
                status=StepStatus.FAILED,
                started_at=datetime.now(timezone.utc),
                completed_at=datetime.now(timezone.utc),
                error=f"Unexpected: {exc}",
                metadata={"traceback": traceback.format_exc()},
            )


async def run_upload(
    kind: UploadKind | str,
    source: UploadSource,
    **kwargs: Any,
) -> UploadReport:
    """
    Run one upload with a default engine and return only its report.

    Pass files as `Path` objects; a `str` source is the CSV content.
    """
    result = await UploadEngine().run(kind, source, **kwargs)
    return result.report
