"""
Admin Schemas
Pydantic models for user management requests and responses.
"""

from typing import Optional

from pydantic import BaseModel, Field

from farm_dashboard.models.user import UserProfile


class RoleStats(BaseModel):
    """Number of users per canonical role."""

    admin: int = Field(default=0, description="Administrators")
    staff: int = Field(default=0, description="Farm staff (including legacy farmer)")
    veterinarian: int = Field(default=0, description="Veterinarians (including legacy vet)")
    other: int = Field(default=0, description="Unrecognized roles")


class UserListResponse(BaseModel):
    """Response for listing users."""

    total: int = Field(..., description="Number of users after filtering")
    users: list[UserProfile] = Field(..., description="Matching users")
    role_stats: RoleStats = Field(..., description="Counts over all users")


class UserProfileUpdate(BaseModel):
    """Request body for editing a user; only fields sent are changed."""

    full_name: Optional[str] = Field(None, min_length=1, max_length=255, description="Display name")
    role: Optional[str] = Field(None, description="admin, staff or veterinarian (farmer and vet accepted)")
