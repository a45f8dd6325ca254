"""
Role lookup against the persisted whitelist.

Google sign-ins are restricted to the institution's email domain.  Any
other signed-in user who is not on the whitelist is a student.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from prepbank.core.config import settings
from prepbank.core.constants import AuthProvider, UserRole
from prepbank.core.logging import get_logger
from prepbank.repositories import whitelist

logger = get_logger(__name__)


class AccessDeniedError(Exception):
    """The sign-in is not allowed on this portal."""

    def __init__(self, message: str, *, email: str = "") -> None:
        self.email = email
        super().__init__(message)


def is_institution_email(email: str, domain: str | None = None) -> bool:
    domain = (domain or settings.INSTITUTION_EMAIL_DOMAIN).lower().lstrip("@")
    return email.lower().strip().endswith("@" + domain)


async def resolve_role(
    db: AsyncSession,
    email: str,
    provider: AuthProvider | str | None = None,
) -> UserRole:
    """
    Return the role for a signed-in user.

    Raises:
        AccessDeniedError: Google sign-in with a non-institutional address.
    """
    email = email.lower().strip()
    if provider is not None and AuthProvider(provider) == AuthProvider.GOOGLE:
        if not is_institution_email(email):
            logger.warning("Google sign-in outside institution domain", email=email)
            raise AccessDeniedError(
                f"Please use your institutional email (@{settings.INSTITUTION_EMAIL_DOMAIN}).",
                email=email,
            )

    entry = await whitelist.get_entry_by_email(db, email)
    if entry is None:
        logger.info("User not on whitelist, defaulting to student", email=email)
        return UserRole.STUDENT

    if provider is not None and entry.auth_provider != AuthProvider(provider):
        logger.info(
            "Sign-in provider differs from whitelist",
            email=email,
            provider=str(provider),
            expected=str(entry.auth_provider),
        )
    return entry.role
