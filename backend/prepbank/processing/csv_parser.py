"""
Quote-aware CSV tokenizer.

A character-at-a-time state machine rather than the stdlib `csv` module
so that field trimming, blank-line dropping and the lenient handling of
unterminated quotes behave exactly as the upload report expects.
"""

from __future__ import annotations

from prepbank.pipeline.errors import CsvParseError

QUOTE = '"'
DELIMITER = ","
LINE_BREAKS = ("\n", "\r")


def parse_csv(text: str, *, strict: bool = False) -> list[list[str]]:
    """
    Split delimited text into rows of trimmed fields.

    The header row is kept as the first element.  Blank lines are
    dropped and a file without a trailing newline keeps its last row.

    Args:
        text: Raw file content.
        strict: Raise CsvParseError on an unterminated quote instead of
                consuming the remainder of the input into the open field.
    """
    rows: list[list[str]] = []
    row: list[str] = []
    field: list[str] = []
    in_quotes = False
    # A quoted empty field ("") is still content.
    field_started = False
    quote_opened_at = -1

    i = 0
    length = len(text)
    while i < length:
        char = text[i]
        next_char = text[i + 1] if i + 1 < length else ""

        if in_quotes:
            if char == QUOTE and next_char == QUOTE:
                field.append(QUOTE)
                i += 1
            elif char == QUOTE:
                in_quotes = False
            else:
                field.append(char)
        elif char == QUOTE:
            in_quotes = True
            field_started = True
            quote_opened_at = i
        elif char == DELIMITER:
            row.append("".join(field).strip())
            field = []
            field_started = False
        elif char in LINE_BREAKS:
            if field or field_started or row:
                row.append("".join(field).strip())
                rows.append(row)
            row = []
            field = []
            field_started = False
            if char == "\r" and next_char == "\n":
                i += 1
        else:
            field.append(char)
        i += 1

    if in_quotes and strict:
        raise CsvParseError(
            f"Unterminated quoted field starting at offset {quote_opened_at}",
            details={"offset": quote_opened_at, "rows_parsed": len(rows)},
        )

    if field or field_started or row:
        row.append("".join(field).strip())
        rows.append(row)

    return rows


def format_csv_row(fields: list[str]) -> str:
    """Serialise one row, quoting fields that contain delimiters, quotes or line breaks."""
    out = []
    for value in fields:
        if any(c in value for c in (DELIMITER, QUOTE, *LINE_BREAKS)):
            value = QUOTE + value.replace(QUOTE, QUOTE * 2) + QUOTE
        out.append(value)
    return DELIMITER.join(out)
