"""
Column tables for each upload kind.

Each kind declares its columns once, in canonical template order, as a
header → record-field mapping.  Rows are read through `RowView`, which
looks fields up by the position their header occupies in the uploaded
file, so a file with reordered or extra columns still maps correctly.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from prepbank.core.constants import UploadKind


@dataclass(frozen=True)
class ColumnSpec:
    """One column of an upload template."""

    header: str
    field: str
    required: bool = False
    missing_message: str = ""

    @property
    def key(self) -> str:
        """Normalised header used for matching."""
        return normalise_header(self.header)


@dataclass(frozen=True)
class UploadSchema:
    """
    The column layout of one upload kind.

    Args:
        kind: Upload kind this schema belongs to.
        columns: Columns in canonical template order.
        min_fields: Rows with fewer fields than this are rejected.
        id_prefix: Prefix of locally synthesised record ids.
    """

    kind: UploadKind
    columns: tuple[ColumnSpec, ...]
    min_fields: int
    id_prefix: str
    by_field: dict[str, ColumnSpec] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        keys = [c.key for c in self.columns]
        if len(set(keys)) != len(keys):
            raise ValueError(f"Duplicate headers in {self.kind} schema: {keys}")
        fields = [c.field for c in self.columns]
        if len(set(fields)) != len(fields):
            raise ValueError(f"Duplicate fields in {self.kind} schema: {fields}")
        if not 0 < self.min_fields <= len(self.columns):
            raise ValueError(
                f"min_fields={self.min_fields} out of range for {self.kind} schema"
            )
        for col in self.columns:
            if col.required and not col.missing_message:
                raise ValueError(f"Required column '{col.header}' has no missing_message")
        object.__setattr__(self, "by_field", {c.field: c for c in self.columns})

    @property
    def headers(self) -> list[str]:
        return [c.header for c in self.columns]

    @property
    def required_columns(self) -> list[ColumnSpec]:
        return [c for c in self.columns if c.required]


def normalise_header(value: str) -> str:
    return value.strip().lower()


class RowView:
    """Read-only access to a parsed row by record field name."""

    def __init__(self, row: list[str], column_index: dict[str, int]) -> None:
        self.row = row
        self.column_index = column_index

    def get(self, field_name: str) -> str:
        """Field value, or "" when the column is absent or the row is short."""
        idx = self.column_index.get(field_name)
        if idx is None or idx >= len(self.row):
            return ""
        return self.row[idx]

    def __len__(self) -> int:
        return len(self.row)


# ═══════════════════════════════════════════════════════════
#  Schemas
# ═══════════════════════════════════════════════════════════

QUESTION_SCHEMA = UploadSchema(
    kind=UploadKind.QUESTION,
    columns=(
        ColumnSpec("Company", "company_name"),
        ColumnSpec("Domain", "domain"),
        ColumnSpec("Role", "role"),
        ColumnSpec("Topic", "topic"),
        ColumnSpec("Difficulty", "difficulty"),
        ColumnSpec("Question", "text", required=True, missing_message="Missing 'Question' text."),
        ColumnSpec("Ideal_Approach", "ideal_approach"),
        ColumnSpec("Asked_In_BITS", "asked_in_bits"),
    ),
    min_fields=6,
    id_prefix="q",
)

RESOURCE_SCHEMA = UploadSchema(
    kind=UploadKind.RESOURCE,
    columns=(
        ColumnSpec("Title", "title", required=True, missing_message="Missing 'Title'."),
        ColumnSpec("URL", "url", required=True, missing_message="Missing 'URL'."),
        ColumnSpec("Description", "description"),
        ColumnSpec("Category", "category"),
        ColumnSpec("Source", "source"),
        ColumnSpec("Duration", "duration"),
    ),
    min_fields=3,
    id_prefix="r",
)

RECOMMENDATION_SCHEMA = UploadSchema(
    kind=UploadKind.RECOMMENDATION,
    columns=(
        ColumnSpec("Faculty Name", "faculty_name"),
        ColumnSpec("Title", "title", required=True, missing_message="Missing 'Title'."),
        ColumnSpec("URL", "url"),
        ColumnSpec("Description", "description"),
        ColumnSpec("Subject", "subject"),
        ColumnSpec("Goal", "goal"),
        ColumnSpec("Expected Learning", "expected_learning"),
        ColumnSpec("Remarks", "remarks"),
        ColumnSpec("Time Estimate", "time_to_complete"),
    ),
    min_fields=7,
    id_prefix="rec",
)

USER_SCHEMA = UploadSchema(
    kind=UploadKind.USER,
    columns=(
        ColumnSpec("Email", "email", required=True, missing_message="Missing 'Email'."),
        ColumnSpec("Role", "role"),
        ColumnSpec("Auth Provider", "auth_provider"),
        ColumnSpec("Name", "name"),
    ),
    min_fields=2,
    id_prefix="u",
)

SCHEMAS: dict[UploadKind, UploadSchema] = {
    UploadKind.QUESTION: QUESTION_SCHEMA,
    UploadKind.RESOURCE: RESOURCE_SCHEMA,
    UploadKind.RECOMMENDATION: RECOMMENDATION_SCHEMA,
    UploadKind.USER: USER_SCHEMA,
}


def get_schema(kind: UploadKind | str) -> UploadSchema:
    """Look up the schema for an upload kind (accepts the enum value string)."""
    return SCHEMAS[UploadKind(kind)]
