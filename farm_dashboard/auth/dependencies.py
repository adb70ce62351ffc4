"""
Authentication Dependencies
FastAPI dependencies for route protection.
"""

import asyncio
import logging
from typing import Annotated, Optional

import httpx
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from supabase import AuthError

from farm_dashboard.auth.roles import Section, allowed_sections, is_allowed
from farm_dashboard.auth.supabase_client import get_supabase_client
from farm_dashboard.core.errors import ErrorCode, create_error_response
from farm_dashboard.models.user import Role, UserProfile
from farm_dashboard.store.supabase_store import FarmStore, get_store

logger = logging.getLogger(__name__)

# Security scheme for Swagger UI
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    store: Annotated[FarmStore, Depends(get_store)],
) -> UserProfile:
    """
    Dependency that validates the Supabase access token and returns the profile.

    Usage:
        @app.get("/protected")
        async def protected_route(user: CurrentUser):
            return {"user_id": user.id}

    A user without a profile row gets the role from their auth metadata
    (usually none), which the access policy maps to its fallback sections.

    Raises:
        HTTPException: 401 if the token is missing, invalid or expired
    """
    if credentials is None:
        raise create_error_response(ErrorCode.NOT_AUTHENTICATED)

    client = get_supabase_client()
    try:
        response = await asyncio.to_thread(client.auth.get_user, credentials.credentials)
    except (AuthError, httpx.HTTPError) as e:
        logger.warning("Token validation failed: %s", e)
        raise create_error_response(ErrorCode.NOT_AUTHENTICATED)

    auth_user = response.user if response else None
    if auth_user is None:
        raise create_error_response(ErrorCode.NOT_AUTHENTICATED)

    profile = await store.fetch_user_profile(str(auth_user.id))
    if profile is None:
        metadata = auth_user.user_metadata or {}
        profile = UserProfile(
            id=str(auth_user.id),
            email=auth_user.email or "",
            full_name=metadata.get("full_name") or "",
            role=metadata.get("role"),
        )

    return profile


# Type alias for cleaner route signatures
CurrentUser = Annotated[UserProfile, Depends(get_current_user)]


def owner_scope(user: UserProfile) -> Optional[str]:
    """Creator id to filter animals by: staff only see the sheep they added."""
    return user.id if user.canonical_role == Role.STAFF else None


def require_section(*sections: str):
    """
    Build a dependency that admits users allowed ANY of ``sections``.

    Usage:
        @router.get("/ledger")
        async def ledger(user: Annotated[UserProfile, Depends(require_section("finance", "expenses"))]):
            ...

    Raises:
        HTTPException: 403 "Access Denied" when no section is allowed
    """
    async def check_section(user: CurrentUser) -> UserProfile:
        if any(is_allowed(user.role, section) for section in sections):
            return user

        logger.warning(
            "Access denied: user %s (role %r) requested %s; allowed %s",
            user.id, user.role, "/".join(sections), allowed_sections(user.role),
        )
        raise create_error_response(ErrorCode.ACCESS_DENIED)

    return check_section


OverviewUser = Annotated[UserProfile, Depends(require_section(Section.OVERVIEW))]
SheepUser = Annotated[UserProfile, Depends(require_section(Section.SHEEP))]
HealthUser = Annotated[UserProfile, Depends(require_section(Section.HEALTH))]
LedgerUser = Annotated[UserProfile, Depends(require_section(Section.FINANCE, Section.EXPENSES))]
FinanceUser = Annotated[UserProfile, Depends(require_section(Section.FINANCE))]
AnalyticsUser = Annotated[UserProfile, Depends(require_section(Section.ANALYTICS))]
ReportsUser = Annotated[UserProfile, Depends(require_section(Section.REPORTS))]
AdminUser = Annotated[UserProfile, Depends(require_section(Section.USERS))]
ExpensesUser = LedgerUser
