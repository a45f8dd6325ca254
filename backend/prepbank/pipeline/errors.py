"""
Exceptions raised inside the upload pipeline.

Everything derives from PipelineError, which carries the upload id, the
step name and a details dict for structured logs.  None of these reach
the caller of run_upload; they are turned into report strings.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(
        self,
        message: str,
        *,
        upload_id: str | None = None,
        step_name: str | None = None,
        details: dict | None = None,
    ) -> None:
        self.upload_id = upload_id
        self.step_name = step_name
        self.details = details or {}
        super().__init__(message)


class StepExecutionError(PipelineError):
    """A step failed during execution."""
    pass


class FlowResolutionError(PipelineError):
    """Could not resolve the step sequence for an upload kind."""
    pass


class FileReadError(PipelineError):
    """The uploaded file could not be read or decoded."""
    pass


class CsvParseError(PipelineError):
    """Strict parsing rejected malformed quoting."""
    pass


class HeaderValidationError(PipelineError):
    """The header row does not contain the columns the upload kind requires."""

    def __init__(
        self,
        message: str,
        *,
        expected: list[str] | None = None,
        **kwargs,
    ) -> None:
        self.expected = expected or []
        super().__init__(message, **kwargs)


class RowError(PipelineError):
    """A single data row could not be materialised.  Never aborts the batch."""
    pass


class ReferenceResolutionError(PipelineError):
    """A referenced company could not be found or created."""

    def __init__(
        self,
        message: str,
        *,
        company_name: str = "",
        **kwargs,
    ) -> None:
        self.company_name = company_name
        super().__init__(message, **kwargs)
