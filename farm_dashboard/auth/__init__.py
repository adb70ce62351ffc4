"""
Authentication Package
Handles token validation, the role-access policy and section guards.

Route dependencies live in ``farm_dashboard.auth.dependencies``.
"""

from farm_dashboard.auth.roles import (
    ACCESS_DENIED,
    NavigationDecision,
    Section,
    allowed_sections,
    default_section,
    is_allowed,
    navigate,
)

__all__ = [
    "ACCESS_DENIED",
    "NavigationDecision",
    "Section",
    "allowed_sections",
    "default_section",
    "is_allowed",
    "navigate",
]
