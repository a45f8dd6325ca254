"""Upload report returned to the caller after every upload."""

from __future__ import annotations

from pydantic import BaseModel, Field


class UploadReport(BaseModel):
    """
    Aggregate outcome of one upload invocation.  Never persisted.

    `errors` are display strings for a human operator.  `warnings` carries
    persistence failures reported after a row was already counted; they
    never change the counters.
    """

    success_count: int = 0
    failed_count: int = 0
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return self.success_count + self.failed_count

    @classmethod
    def file_failure(cls, message: str) -> "UploadReport":
        """The whole upload failed before any row could be inspected."""
        return cls(success_count=0, failed_count=1, errors=[message])
