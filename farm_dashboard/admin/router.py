"""
Admin Router
API endpoints for user management.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from farm_dashboard.admin.schemas import RoleStats, UserListResponse, UserProfileUpdate
from farm_dashboard.auth.dependencies import AdminUser
from farm_dashboard.core.errors import ErrorCode, create_error_response
from farm_dashboard.models.user import Role, UserProfile, normalize_role
from farm_dashboard.store.supabase_store import FarmStore, get_store
from farm_dashboard.store.tables import StoreTable

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin"])

Store = Annotated[FarmStore, Depends(get_store)]


def count_roles(users: list[UserProfile]) -> RoleStats:
    """Count users per canonical role."""
    stats = RoleStats()
    for user in users:
        role = user.canonical_role
        if role is None:
            stats.other += 1
        else:
            setattr(stats, role.value, getattr(stats, role.value) + 1)
    return stats


@router.get(
    "/users",
    response_model=UserListResponse,
    summary="List users",
    description="Search by name or email and filter by role.",
)
async def list_users(
    admin_user: AdminUser,
    store: Store,
    search: Optional[str] = Query(None, description="Match on full name or email"),
    role: Optional[str] = Query(None, description="Filter by role (aliases accepted)"),
) -> UserListResponse:
    """
    Get all users with per-role counts.

    Counts cover every user; the list honours the search and role filter.
    """
    users = await store.fetch_users()
    stats = count_roles(users)

    filtered = users
    if search:
        term = search.strip().lower()
        filtered = [
            u for u in filtered
            if term in u.full_name.lower() or term in u.email.lower()
        ]
    if role:
        wanted = normalize_role(role)
        if wanted is None:
            raise create_error_response(ErrorCode.VALIDATION_ERROR, message=f"Unknown role: {role}")
        filtered = [u for u in filtered if u.canonical_role == wanted]

    return UserListResponse(total=len(filtered), users=filtered, role_stats=stats)


@router.patch(
    "/users/{user_id}",
    response_model=UserProfile,
    summary="Update a user",
)
async def update_user(
    user_id: str,
    data: UserProfileUpdate,
    admin_user: AdminUser,
    store: Store,
) -> UserProfile:
    """
    Update a user's name and/or role.

    Legacy role names are stored in canonical form. Admins cannot demote
    themselves.
    """
    values = data.model_dump(exclude_unset=True, exclude_none=True)

    if "role" in values:
        role = normalize_role(values["role"])
        if role is None:
            raise create_error_response(
                ErrorCode.VALIDATION_ERROR,
                message="Role must be one of admin, staff or veterinarian",
            )
        if user_id == admin_user.id and role != Role.ADMIN:
            raise create_error_response(ErrorCode.VALIDATION_ERROR, message="Cannot demote yourself")
        values["role"] = role.value

    if not values:
        raise create_error_response(ErrorCode.VALIDATION_ERROR, message="No fields to update")

    row = await store.update_row(StoreTable.USERS, user_id, values)
    logger.info("Admin %s updated user %s: %s", admin_user.email, user_id, sorted(values))
    return UserProfile.model_validate(row)


@router.delete(
    "/users/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a user profile",
)
async def delete_user(user_id: str, admin_user: AdminUser, store: Store) -> Response:
    """
    Delete a user's profile row.

    The Supabase Auth account is left in place; without a profile the
    user falls back to the default sections.
    """
    if user_id == admin_user.id:
        raise create_error_response(ErrorCode.VALIDATION_ERROR, message="Cannot delete yourself")

    await store.delete_row(StoreTable.USERS, user_id)
    logger.info("Admin %s deleted user %s", admin_user.email, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
