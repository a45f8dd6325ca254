"""
Models package — re-exports Base and all models.

Import models here so `Base.metadata` picks up every table.

When adding a new model:
    1. Create `prepbank/db/models/<table_name>.py`
    2. Import it here
"""

from prepbank.db.models.base import Base
from prepbank.db.models.company import CompanyRow
from prepbank.db.models.question import QuestionRow
from prepbank.db.models.recommendation import RecommendationRow
from prepbank.db.models.resource import ResourceRow
from prepbank.db.models.whitelist_entry import WhitelistEntryRow

__all__ = [
    "Base",
    "CompanyRow",
    "QuestionRow",
    "ResourceRow",
    "RecommendationRow",
    "WhitelistEntryRow",
]
