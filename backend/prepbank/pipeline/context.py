"""
UploadContext — mutable state object carried through every step.

This is the single source of truth for one upload invocation.  Each
step reads from and writes to the context; nothing in it outlives the
call (the resolved company map in particular is never cached across
uploads).
"""

from __future__ import annotations

import asyncio
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

from prepbank.core.constants import Progress, UploadKind
from prepbank.core.logging import get_logger
from prepbank.pipeline.collaborators import UploadCollaborators
from prepbank.processing.columns import RowView, UploadSchema, get_schema
from prepbank.schemas import Company, UploadReport

logger = get_logger(__name__)

UploadSource = str | bytes | Path
ProgressCallback = Callable[[int], Any]


# ═══════════════════════════════════════════════════════════
#  StepResult
# ═══════════════════════════════════════════════════════════

@dataclass
class StepResult:
    """Outcome of a single pipeline step execution."""

    step_name: str
    status: str                     # StepStatus value
    started_at: datetime | None = None
    completed_at: datetime | None = None
    duration_ms: int = 0
    error: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "step_name": self.step_name,
            "status": self.status,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_ms": self.duration_ms,
            "error": self.error,
            "metadata": self.metadata,
        }


# ═══════════════════════════════════════════════════════════
#  UploadContext
# ═══════════════════════════════════════════════════════════

@dataclass
class UploadContext:
    """
    Carries all state between pipeline steps.

    Populated progressively: the read step fills `text`, the parse step
    `rows`, header validation `column_index`, the resolver
    `resolved_companies`, and the materializer `records` and `report`.
    """

    # ─── Identity (set at init) ────────────────────────
    kind: UploadKind
    source: UploadSource
    collaborators: UploadCollaborators = field(default_factory=UploadCollaborators)
    upload_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    filename: str | None = None

    # ─── Caller-supplied inputs ───────────────────────
    known_companies: list[Company] = field(default_factory=list)
    faculty_name: str | None = None
    on_progress: ProgressCallback | None = None

    # ─── Behaviour switches (defaults come from settings) ──
    strict_csv: bool = False
    strict_enums: bool = False
    resolver_timeout: float | None = None

    # ─── Parse / validate ─────────────────────────────
    text: str = ""
    rows: list[list[str]] = field(default_factory=list)
    column_index: dict[str, int] = field(default_factory=dict)

    # ─── Resolve ──────────────────────────────────────
    resolved_companies: dict[str, Company] = field(default_factory=dict)
    company_failures: dict[str, str] = field(default_factory=dict)

    # ─── Materialize ──────────────────────────────────
    records: list[Any] = field(default_factory=list)
    pending: list[tuple[int, asyncio.Future]] = field(default_factory=list)
    report: UploadReport = field(default_factory=UploadReport)

    # ─── Execution tracking ───────────────────────────
    batch_stamp_ms: int = field(default_factory=lambda: int(time.time() * 1000))
    progress: int = 0
    halted: bool = False
    step_results: list[StepResult] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    # ─── Helpers ───────────────────────────────────────

    @property
    def schema(self) -> UploadSchema:
        return get_schema(self.kind)

    @property
    def header(self) -> list[str]:
        return self.rows[0] if self.rows else []

    @property
    def data_rows(self) -> list[list[str]]:
        return self.rows[1:]

    def views(self) -> list[RowView]:
        """Data rows wrapped for by-name field access."""
        return [RowView(row, self.column_index) for row in self.data_rows]

    def halt(self, report: UploadReport) -> None:
        """Finish the upload early with `report`; remaining steps are skipped."""
        self.report = report
        self.halted = True

    def set_progress(self, value: Progress | int) -> None:
        """Report an advisory progress checkpoint to the caller."""
        self.progress = int(value)
        if self.on_progress is None:
            return
        try:
            self.on_progress(self.progress)
        except Exception as exc:
            logger.warning("Progress callback raised", progress=self.progress, error=str(exc))

    def add_error(self, error: str) -> None:
        """Record an internal (non-report) error."""
        self.errors.append(error)

    def to_summary_dict(self) -> dict[str, Any]:
        """Compact summary for logging."""
        return {
            "upload_id": self.upload_id,
            "kind": str(self.kind),
            "filename": self.filename,
            "rows_parsed": len(self.rows),
            "data_rows": len(self.data_rows),
            "companies_resolved": len(self.resolved_companies),
            "company_failures": len(self.company_failures),
            "records": len(self.records),
            "success": self.report.success_count,
            "failed": self.report.failed_count,
            "halted": self.halted,
            "errors": self.errors,
        }
