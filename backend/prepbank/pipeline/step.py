"""
PipelineStep — base class for the stages of an upload.

A step reads what earlier steps left on the UploadContext, does one
thing, and writes its output back.  Timing, logging and failure
handling belong to the engine.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

from prepbank.core.constants import StepStatus
from prepbank.pipeline.context import StepResult, UploadContext


class PipelineStep(ABC):
    """
    One stage of an upload flow.

    Subclasses set `name` and `description` and implement `execute`.
    When a step decides the upload cannot go on (empty file, header
    mismatch) it calls `ctx.halt(report)` rather than raising, and every
    later step is skipped.
    """

    name: str = "unnamed_step"
    description: str = ""
    # Failures in these steps are reported as an unreadable file.
    file_level: bool = False

    @abstractmethod
    async def execute(self, ctx: UploadContext) -> StepResult:
        """Do the work.  Raise StepExecutionError when the step cannot finish."""
        ...

    async def should_skip(self, ctx: UploadContext) -> bool:
        return ctx.halted

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def _success(
        self,
        started_at: datetime,
        metadata: dict[str, Any] | None = None,
    ) -> StepResult:
        finished = self._now()
        return StepResult(
            step_name=self.name,
            status=StepStatus.COMPLETED,
            started_at=started_at,
            completed_at=finished,
            duration_ms=int((finished - started_at).total_seconds() * 1000),
            metadata=metadata or {},
        )
