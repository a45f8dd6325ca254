"""
Row materializers — turn a validated row into a typed domain record.

One materializer per upload kind.  Each reads its row through a
`RowView` (fields by name), applies the kind's defaults and coercions,
and raises RowError with an operator-facing message when the row cannot
become a record.  Field-count checks and line numbering are the
caller's concern.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from enum import StrEnum
from typing import Any, TypeVar

from pydantic import ValidationError

from prepbank.core.constants import (
    AuthProvider,
    Difficulty,
    RecommendationSubject,
    Topic,
    UploadKind,
    UserRole,
)
from prepbank.pipeline.errors import RowError
from prepbank.processing.columns import RowView, UploadSchema, get_schema
from prepbank.schemas import (
    Company,
    Question,
    Recommendation,
    Resource,
    WhitelistEntry,
)

E = TypeVar("E", bound=StrEnum)

TRUTHY = ("yes", "true")


# ═══════════════════════════════════════════════════════════
#  Coercion helpers
# ═══════════════════════════════════════════════════════════

def coerce_bool(value: str) -> bool:
    """True only for "yes"/"true" (any case); everything else is False."""
    return value.strip().lower() in TRUTHY


def coerce_enum(
    enum_cls: type[E],
    value: str,
    default: E,
    *,
    strict: bool = False,
    label: str = "",
) -> E:
    """
    Match `value` exactly against the enum's values.

    Unknown values fall back to `default`, or raise RowError when
    `strict` is set.  A blank value always takes the default.
    """
    if not value:
        return default
    try:
        return enum_cls(value)
    except ValueError:
        if strict:
            allowed = ", ".join(m.value for m in enum_cls)
            raise RowError(f"Invalid {label or enum_cls.__name__} '{value}' (expected one of: {allowed}).")
        return default


def _lookup_enum(enum_cls: type[E], value: str) -> E | None:
    """Case-insensitive match on value; None if nothing matches."""
    lowered = value.strip().lower()
    for member in enum_cls:
        if member.value.lower() == lowered:
            return member
    return None


# ═══════════════════════════════════════════════════════════
#  Materializers
# ═══════════════════════════════════════════════════════════

class RowMaterializer(ABC):
    """Base class: schema checks shared by every kind."""

    kind: UploadKind

    def __init__(self, *, batch_stamp_ms: int, strict_enums: bool = False) -> None:
        self.batch_stamp_ms = batch_stamp_ms
        self.strict_enums = strict_enums

    @property
    def schema(self) -> UploadSchema:
        return get_schema(self.kind)

    def record_id(self, index: int) -> str:
        """Locally synthesised id; the store may replace it."""
        return f"{self.schema.id_prefix}_bulk_{self.batch_stamp_ms}_{index}"

    def check_required(self, view: RowView) -> None:
        for col in self.schema.required_columns:
            if not view.get(col.field):
                raise RowError(col.missing_message)

    def materialize(self, view: RowView, index: int) -> Any:
        """Validate and build the record for the data row at `index` (0-based)."""
        self.check_required(view)
        try:
            return self.build(view, index)
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in exc.errors()
            )
            raise RowError(f"Invalid record ({problems}).") from exc

    @abstractmethod
    def build(self, view: RowView, index: int) -> Any:
        ...


class QuestionMaterializer(RowMaterializer):
    kind = UploadKind.QUESTION

    def __init__(self, companies: dict[str, Company], **kwargs) -> None:
        super().__init__(**kwargs)
        self.companies = companies

    def build(self, view: RowView, index: int) -> Question:
        company_name = view.get("company_name")
        company = self.companies.get(company_name)
        if company is None:
            raise RowError(f"Company '{company_name}' could not be found or created.")

        return Question(
            id=self.record_id(index),
            company_id=company.id,
            company_name=company_name or "Unknown",
            domain=view.get("domain") or "General",
            role=view.get("role") or "General",
            topic=coerce_enum(
                Topic, view.get("topic"), Topic.GENERAL,
                strict=self.strict_enums, label="topic",
            ),
            difficulty=coerce_enum(
                Difficulty, view.get("difficulty"), Difficulty.MEDIUM,
                strict=self.strict_enums, label="difficulty",
            ),
            text=view.get("text"),
            ideal_approach=view.get("ideal_approach"),
            asked_in_bits=coerce_bool(view.get("asked_in_bits")),
            frequency=1,
        )


class ResourceMaterializer(RowMaterializer):
    kind = UploadKind.RESOURCE

    def build(self, view: RowView, index: int) -> Resource:
        return Resource(
            id=self.record_id(index),
            title=view.get("title"),
            url=view.get("url"),
            description=view.get("description"),
            category=view.get("category") or "General",
            source=view.get("source") or "External",
            duration=view.get("duration") or "Self-paced",
        )


class RecommendationMaterializer(RowMaterializer):
    kind = UploadKind.RECOMMENDATION

    def __init__(self, *, faculty_name: str, upload_date: date, **kwargs) -> None:
        super().__init__(**kwargs)
        self.faculty_name = faculty_name
        self.upload_date = upload_date

    def build(self, view: RowView, index: int) -> Recommendation:
        return Recommendation(
            id=self.record_id(index),
            faculty_name=view.get("faculty_name") or self.faculty_name,
            date=self.upload_date.isoformat(),
            title=view.get("title"),
            url=view.get("url") or None,
            description=view.get("description"),
            subject=coerce_enum(
                RecommendationSubject, view.get("subject"), RecommendationSubject.PYTHON,
                strict=self.strict_enums, label="subject",
            ),
            goal=view.get("goal"),
            expected_learning=view.get("expected_learning"),
            remarks=view.get("remarks") or None,
            time_to_complete=view.get("time_to_complete") or None,
        )


class WhitelistMaterializer(RowMaterializer):
    """
    Whitelist rows grant privileges, so role and provider are never
    silently coerced: an unknown role fails the row.
    """

    kind = UploadKind.USER

    def __init__(self, *, institution_domain: str, **kwargs) -> None:
        super().__init__(**kwargs)
        self.institution_domain = institution_domain.lower().lstrip("@")

    def build(self, view: RowView, index: int) -> WhitelistEntry:
        email = view.get("email").lower()
        if "@" not in email:
            raise RowError(f"Invalid email '{email}'.")

        role_value = view.get("role")
        role = _lookup_enum(UserRole, role_value)
        if role is None:
            allowed = ", ".join(r.value for r in UserRole)
            raise RowError(f"Invalid role '{role_value}' (expected one of: {allowed}).")

        provider_value = view.get("auth_provider")
        provider = _lookup_enum(AuthProvider, provider_value) if provider_value else AuthProvider.GOOGLE
        if provider is None:
            if self.strict_enums:
                allowed = ", ".join(p.value for p in AuthProvider)
                raise RowError(f"Invalid auth provider '{provider_value}' (expected one of: {allowed}).")
            provider = AuthProvider.GOOGLE

        if provider == AuthProvider.GOOGLE and not email.endswith("@" + self.institution_domain):
            raise RowError(
                f"Google sign-in requires an @{self.institution_domain} address (got '{email}')."
            )

        return WhitelistEntry(
            id=self.record_id(index),
            email=email,
            role=role,
            auth_provider=provider,
            name=view.get("name") or None,
        )
