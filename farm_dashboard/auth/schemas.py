"""
Authentication Schemas
Response models for the current user and navigation decisions.
"""

from typing import Optional

from pydantic import BaseModel, Field


class UserResponse(BaseModel):
    """Current user with the sections their role may open."""

    id: str = Field(..., description="User unique identifier")
    email: str = Field(..., description="User email address")
    full_name: str = Field(default="", description="Display name")
    role: str = Field(..., description="Canonical role (admin, staff or veterinarian)")
    allowed_sections: list[str] = Field(..., description="Sections in menu order")
    default_section: str = Field(..., description="Landing section for this role")


class NavigationRequest(BaseModel):
    """Request body for a section change."""

    section: str = Field(..., min_length=1, description="Requested section")


class NavigationResponse(BaseModel):
    """Where the user ends up after a navigation request."""

    section: str = Field(..., description="Section to render")
    allowed: bool = Field(..., description="Whether the requested section was allowed")
    notice: Optional[str] = Field(None, description="Denial notice to show the user")
