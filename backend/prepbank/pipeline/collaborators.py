"""
UploadCollaborators — the record-creation interface the pipeline writes through.

The pipeline never talks to storage directly.  Callers inject one
callable per entity kind; each may be a plain function or a coroutine
function.  `create_company` is awaited (the resolver needs the assigned
id); the others are dispatched without blocking the next row.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from prepbank.core.constants import UploadKind
from prepbank.pipeline.errors import StepExecutionError
from prepbank.schemas import Company, Question, Recommendation, Resource, WhitelistEntry

CompanyCreator = Callable[[Company], "Company | None | Awaitable[Company | None]"]
RecordCreator = Callable[[Any], Any]


@dataclass
class UploadCollaborators:
    """Creation callbacks, one per entity kind.  Unused kinds may be left as None."""

    create_company: CompanyCreator | None = None
    create_question: Callable[[Question], Any] | None = None
    create_resource: Callable[[Resource], Any] | None = None
    create_recommendation: Callable[[Recommendation], Any] | None = None
    create_whitelist_entry: Callable[[WhitelistEntry], Any] | None = None

    def creator_for(self, kind: UploadKind) -> RecordCreator:
        """Return the row creation callback for `kind`."""
        creator = {
            UploadKind.QUESTION: self.create_question,
            UploadKind.RESOURCE: self.create_resource,
            UploadKind.RECOMMENDATION: self.create_recommendation,
            UploadKind.USER: self.create_whitelist_entry,
        }[kind]
        if creator is None:
            raise StepExecutionError(
                f"No creation callback configured for '{kind}' records",
                details={"kind": str(kind)},
            )
        return creator
