"""
Upload pipeline — bulk CSV ingestion.

Step-based engine that turns an uploaded CSV into validated records:
read → parse → validate headers → resolve companies (questions only) →
materialize rows, with per-step logging and a per-row report.

The engine itself lives in `prepbank.pipeline.engine`.
"""

from prepbank.pipeline.collaborators import UploadCollaborators
from prepbank.pipeline.context import StepResult, UploadContext
from prepbank.pipeline.step import PipelineStep

__all__ = ["UploadCollaborators", "UploadContext", "PipelineStep", "StepResult"]
