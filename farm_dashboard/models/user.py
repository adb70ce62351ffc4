"""
User Model
Profile row from the ``users`` table; the role is the only authorization key.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import field_validator

from farm_dashboard.models.base import TimestampedRecord


class Role(str, Enum):
    """Canonical user roles."""
    ADMIN = "admin"
    STAFF = "staff"
    VETERINARIAN = "veterinarian"


# Legacy role names still present in older profile rows
ROLE_ALIASES = {
    "farmer": Role.STAFF,
    "vet": Role.VETERINARIAN,
}


def normalize_role(value: Any) -> Optional[Role]:
    """
    Map a raw role value to a canonical Role.

    Args:
        value: Role string (canonical name or legacy alias) or Role

    Returns:
        Canonical Role, or None if the value is not a known role
    """
    if isinstance(value, Role):
        return value
    if not isinstance(value, str):
        return None

    key = value.strip().lower()
    if key in ROLE_ALIASES:
        return ROLE_ALIASES[key]
    try:
        return Role(key)
    except ValueError:
        return None


class UserProfile(TimestampedRecord):
    """
    Authenticated user's profile.

    Attributes:
        id: Supabase auth user id
        email: User email address
        full_name: Display name
        role: Canonical role value; unknown roles are kept verbatim so the
            access policy can apply its fallback
    """

    email: str = ""
    full_name: str = ""
    role: str = ""

    @field_validator("email", "full_name", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("role", mode="before")
    @classmethod
    def _normalize_role(cls, value: Any) -> str:
        role = normalize_role(value)
        if role is not None:
            return role.value
        return "" if value is None else str(value).strip().lower()

    @property
    def canonical_role(self) -> Optional[Role]:
        return normalize_role(self.role)

    @property
    def is_admin(self) -> bool:
        return self.canonical_role == Role.ADMIN
