"""
Downloadable CSV templates — a header line plus one sample row per kind.

These are fixed strings; they are not derived from uploaded data.
"""

from __future__ import annotations

from prepbank.core.constants import UploadKind
from prepbank.processing.columns import get_schema
from prepbank.processing.csv_parser import format_csv_row

TEMPLATE_FILENAMES: dict[UploadKind, str] = {
    UploadKind.QUESTION: "question_upload_template.csv",
    UploadKind.RESOURCE: "resource_upload_template.csv",
    UploadKind.RECOMMENDATION: "faculty_recommendation_template.csv",
    UploadKind.USER: "user_whitelist_template.csv",
}

SAMPLE_ROWS: dict[UploadKind, list[str]] = {
    UploadKind.QUESTION: [
        "JPMorgan", "Finance", "Analyst", "Analytics", "Medium",
        'Describe a project, and its "impact".', "STAR method...", "Yes",
    ],
    UploadKind.RESOURCE: [
        "Advanced Python", "https://example.com", "Deep dive into pandas...",
        "Python", "Coursera", "10 Hours",
    ],
    UploadKind.RECOMMENDATION: [
        "Dr. A. Sharma", "Advanced Pandas", "https://example.com", "Deep dive...",
        "Python", "Master Dataframes", "Handling complex data",
        "Focus on MultiIndex, groupby", "2 Hours",
    ],
    UploadKind.USER: [
        "faculty@pilani.bits-pilani.ac.in", "faculty", "google", "Prof. Example",
    ],
}


def render_template(kind: UploadKind | str) -> tuple[str, str]:
    """Return (filename, csv_content) for the given upload kind."""
    kind = UploadKind(kind)
    schema = get_schema(kind)
    content = format_csv_row(schema.headers) + "\n" + format_csv_row(SAMPLE_ROWS[kind])
    return TEMPLATE_FILENAMES[kind], content
