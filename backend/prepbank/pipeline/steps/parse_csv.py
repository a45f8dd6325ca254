"""
ParseCsvStep — tokenizes the file text into rows of trimmed fields.
"""

from __future__ import annotations

from prepbank.core.constants import Progress
from prepbank.core.logging import get_logger
from prepbank.pipeline.context import StepResult, UploadContext
from prepbank.pipeline.errors import CsvParseError, StepExecutionError
from prepbank.pipeline.step import PipelineStep
from prepbank.processing.csv_parser import parse_csv

logger = get_logger(__name__)


class ParseCsvStep(PipelineStep):
    """Parse CSV text into rows (header first)."""

    name = "parse_csv"
    description = "Parse CSV rows"
    file_level = True

    async def execute(self, ctx: UploadContext) -> StepResult:
        started_at = self._now()

        try:
            ctx.rows = parse_csv(ctx.text, strict=ctx.strict_csv)
        except CsvParseError as exc:
            raise StepExecutionError(
                f"CSV parsing failed: {exc}",
                upload_id=ctx.upload_id,
                step_name=self.name,
                details=exc.details,
            ) from exc

        ctx.set_progress(Progress.PARSED)
        logger.info(
            "CSV parsed",
            rows=len(ctx.rows),
            data_rows=len(ctx.data_rows),
            header=ctx.header,
        )

        return self._success(started_at, metadata={
            "rows": len(ctx.rows),
            "data_rows": len(ctx.data_rows),
        })
