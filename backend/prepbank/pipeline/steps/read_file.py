"""
ReadFileStep — loads the uploaded file into memory as text.

Accepts a `Path`, raw bytes, or already-decoded text.  A `str` is
always CSV content; a one-line string naming an existing file is
rejected rather than parsed as data.  Bytes are decoded as UTF-8 with
any leading byte-order mark stripped (Excel adds one to CSV exports).
The size limit is advisory: oversized files are logged, not rejected.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from prepbank.core.config import settings
from prepbank.core.constants import Progress
from prepbank.core.logging import get_logger
from prepbank.pipeline.context import StepResult, UploadContext
from prepbank.pipeline.errors import FileReadError, StepExecutionError
from prepbank.pipeline.step import PipelineStep

logger = get_logger(__name__)

BOM = "\ufeff"


def _looks_like_path(text: str) -> bool:
    """A single-line string naming an existing file."""
    if not text or any(c in text for c in ("\n", "\r")):
        return False
    try:
        return Path(text).is_file()
    except (OSError, ValueError):
        return False


class ReadFileStep(PipelineStep):
    """Read and decode the uploaded file."""

    name = "read_file"
    description = "Read uploaded file"
    file_level = True

    async def execute(self, ctx: UploadContext) -> StepResult:
        started_at = self._now()

        try:
            source = ctx.source
            if isinstance(source, Path):
                ctx.filename = ctx.filename or source.name
                raw = await asyncio.to_thread(source.read_bytes)
            elif isinstance(source, (bytes, bytearray)):
                raw = bytes(source)
            elif isinstance(source, str):
                if _looks_like_path(source):
                    raise FileReadError(
                        f"Got the file name '{source}' as CSV text; pass a Path to read a file",
                        upload_id=ctx.upload_id,
                        step_name=self.name,
                    )
                raw = None
                ctx.text = source.removeprefix(BOM)
            else:
                raise FileReadError(
                    f"Unsupported upload source type: {type(source).__name__}",
                    upload_id=ctx.upload_id,
                    step_name=self.name,
                )

            if raw is not None:
                size = len(raw)
                ctx.text = raw.decode("utf-8-sig")
            else:
                size = len(ctx.text.encode("utf-8"))

            if size > settings.MAX_UPLOAD_BYTES:
                logger.warning(
                    "Upload exceeds advisory size limit",
                    filename=ctx.filename,
                    size_bytes=size,
                    limit_bytes=settings.MAX_UPLOAD_BYTES,
                )

            ctx.set_progress(Progress.READ)
            logger.info("File read", filename=ctx.filename, size_bytes=size)

            return self._success(started_at, metadata={
                "filename": ctx.filename,
                "size_bytes": size,
                "characters": len(ctx.text),
            })

        except (OSError, UnicodeDecodeError, FileReadError) as exc:
            raise StepExecutionError(
                f"Could not read upload: {exc}",
                upload_id=ctx.upload_id,
                step_name=self.name,
            ) from exc
