"""Record and report schema package."""

from prepbank.schemas.records import (
    Company,
    Question,
    Recommendation,
    Resource,
    WhitelistEntry,
)
from prepbank.schemas.report import UploadReport

__all__ = [
    "Company",
    "Question",
    "Resource",
    "Recommendation",
    "WhitelistEntry",
    "UploadReport",
]
