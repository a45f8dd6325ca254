"""
Header validation — checks an uploaded header row against a kind's schema
before any data row is processed.
"""

from __future__ import annotations

from prepbank.pipeline.errors import HeaderValidationError
from prepbank.processing.columns import UploadSchema, normalise_header


def validate_headers(header_row: list[str], expected: list[str]) -> bool:
    """
    Return True when every expected header appears in `header_row`.

    Matching is case-insensitive and whitespace-trimmed.  Order does not
    matter and extra columns are tolerated, but a header row shorter
    than `expected` always fails.
    """
    if len(header_row) < len(expected):
        return False
    present = {normalise_header(h) for h in header_row}
    return all(normalise_header(e) in present for e in expected)


def resolve_columns(header_row: list[str], schema: UploadSchema) -> dict[str, int]:
    """
    Map each schema field to the index of its header in `header_row`.

    The first occurrence wins when a header is repeated.  Fields whose
    header is missing are left out of the mapping.
    """
    positions: dict[str, int] = {}
    for idx, header in enumerate(header_row):
        positions.setdefault(normalise_header(header), idx)

    return {
        col.field: positions[col.key]
        for col in schema.columns
        if col.key in positions
    }


def header_error_message(expected: list[str]) -> str:
    return f"Invalid CSV Format. Expected headers: {', '.join(expected)}"


def require_headers(header_row: list[str], expected: list[str]) -> None:
    """
    Raises:
        HeaderValidationError: The header row lacks an expected column.
    """
    if not validate_headers(header_row, expected):
        raise HeaderValidationError(header_error_message(expected), expected=expected)
