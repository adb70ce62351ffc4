"""
Authentication Router
Current user profile and section navigation.
"""

import logging

from fastapi import APIRouter

from farm_dashboard.auth.dependencies import CurrentUser
from farm_dashboard.auth.roles import allowed_sections, default_section, navigate
from farm_dashboard.auth.schemas import NavigationRequest, NavigationResponse, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user",
    description="Get the authenticated user's profile and allowed sections.",
)
async def get_me(current_user: CurrentUser) -> UserResponse:
    """Profile plus menu for the authenticated user."""
    return UserResponse(
        id=current_user.id,
        email=current_user.email,
        full_name=current_user.full_name,
        role=current_user.role,
        allowed_sections=list(allowed_sections(current_user.role)),
        default_section=default_section(current_user.role),
    )


@router.post(
    "/navigate",
    response_model=NavigationResponse,
    summary="Navigate to a section",
    description="Resolve a section change; denied requests redirect to the default section.",
)
async def navigate_to(request: NavigationRequest, current_user: CurrentUser) -> NavigationResponse:
    """
    Resolve a navigation request for the current user.

    Denial is not an error: the response names the section to show
    instead and carries the notice.
    """
    decision = navigate(current_user.role, request.section)
    if not decision.allowed:
        logger.warning(
            "Navigation denied: user %s (role %r) to %s, redirected to %s",
            current_user.id, current_user.role, request.section, decision.section,
        )
    return NavigationResponse(
        section=decision.section,
        allowed=decision.allowed,
        notice=decision.notice,
    )
