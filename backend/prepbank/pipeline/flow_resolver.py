"""
FlowResolver — maps an upload kind to an ordered step sequence.

Every kind shares the read → parse → validate-headers prefix and ends
with row materialisation.  Question uploads insert company resolution
in between, since question rows reference companies by name.

To add a new upload kind:
    1. Add it to UploadKind and declare its columns in processing/columns.py
    2. Add a materializer in processing/materializers.py
    3. Register the flow in FLOW_REGISTRY below
"""

from __future__ import annotations

from typing import Callable

from prepbank.core.constants import UploadKind
from prepbank.core.logging import get_logger
from prepbank.pipeline.errors import FlowResolutionError
from prepbank.pipeline.step import PipelineStep
from prepbank.pipeline.steps.materialize_rows import MaterializeRowsStep
from prepbank.pipeline.steps.parse_csv import ParseCsvStep
from prepbank.pipeline.steps.read_file import ReadFileStep
from prepbank.pipeline.steps.resolve_companies import ResolveCompaniesStep
from prepbank.pipeline.steps.validate_headers import ValidateHeadersStep

logger = get_logger(__name__)


def _common_pre_steps() -> list[PipelineStep]:
    """Steps that run for EVERY kind before any row is touched."""
    return [
        ReadFileStep(),
        ParseCsvStep(),
        ValidateHeadersStep(),
    ]


def _simple_flow() -> list[PipelineStep]:
    """Kinds without cross-entity references."""
    return [
        *_common_pre_steps(),
        MaterializeRowsStep(),
    ]


def _question_flow() -> list[PipelineStep]:
    """Questions: every company is resolved before the first row is built."""
    return [
        *_common_pre_steps(),
        ResolveCompaniesStep(),
        MaterializeRowsStep(),
    ]


FLOW_REGISTRY: dict[UploadKind, Callable[[], list[PipelineStep]]] = {
    UploadKind.QUESTION: _question_flow,
    UploadKind.RESOURCE: _simple_flow,
    UploadKind.RECOMMENDATION: _simple_flow,
    UploadKind.USER: _simple_flow,
}


class FlowResolver:
    """Resolves an upload kind to an ordered list of pipeline steps."""

    def __init__(
        self,
        registry: dict[UploadKind, Callable[[], list[PipelineStep]]] | None = None,
    ) -> None:
        self.registry = registry or FLOW_REGISTRY

    def resolve(self, kind: UploadKind | str) -> list[PipelineStep]:
        """
        Return the ordered step list for `kind`.

        Raises:
            FlowResolutionError: If the kind is unknown or has no flow.
        """
        try:
            kind = UploadKind(kind)
        except ValueError as exc:
            raise FlowResolutionError(
                f"Unknown upload kind '{kind}'",
                step_name="flow_resolution",
            ) from exc

        builder = self.registry.get(kind)
        if builder is None:
            raise FlowResolutionError(
                f"No flow registered for upload kind '{kind}'",
                step_name="flow_resolution",
            )

        steps = builder()
        logger.debug("Flow resolved", kind=str(kind), steps=[s.name for s in steps])
        return steps

    def list_available_flows(self) -> list[str]:
        """Return all registered kinds."""
        return [str(k) for k in self.registry]
