"""
ValidateHeadersStep — gates the upload on its header row.

Halts the upload when the file has no data rows, or when the header row
lacks a column the kind requires.  On success it records where each
schema field lives in the uploaded file.
"""

from __future__ import annotations

from prepbank.core.constants import EMPTY_FILE_MESSAGE
from prepbank.core.logging import get_logger
from prepbank.pipeline.context import StepResult, UploadContext
from prepbank.pipeline.errors import HeaderValidationError
from prepbank.pipeline.step import PipelineStep
from prepbank.schemas import UploadReport
from prepbank.validation.header_validator import require_headers, resolve_columns

logger = get_logger(__name__)


class ValidateHeadersStep(PipelineStep):
    """Check the header row against the kind's expected headers."""

    name = "validate_headers"
    description = "Validate CSV header row"

    async def execute(self, ctx: UploadContext) -> StepResult:
        started_at = self._now()
        expected = ctx.schema.headers

        if len(ctx.rows) < 2:
            logger.warning("Upload has no data rows", rows=len(ctx.rows))
            ctx.halt(UploadReport(errors=[EMPTY_FILE_MESSAGE]))
            return self._success(started_at, metadata={"valid": False, "reason": "empty"})

        try:
            require_headers(ctx.header, expected)
        except HeaderValidationError as exc:
            logger.warning(
                "Header validation failed",
                header=ctx.header,
                expected=exc.expected,
            )
            ctx.halt(UploadReport(
                success_count=0,
                failed_count=len(ctx.data_rows),
                errors=[str(exc)],
            ))
            return self._success(started_at, metadata={"valid": False, "reason": "header_mismatch"})

        ctx.column_index = resolve_columns(ctx.header, ctx.schema)
        reordered = [
            col.header for pos, col in enumerate(ctx.schema.columns)
            if ctx.column_index.get(col.field) != pos
        ]
        if reordered:
            logger.info("Columns resolved by header name", moved=reordered)

        return self._success(started_at, metadata={
            "valid": True,
            "column_index": ctx.column_index,
        })
