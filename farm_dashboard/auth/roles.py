"""
Role-Access Policy
Static table mapping each role to the dashboard sections it may use.
"""

from dataclasses import dataclass
from typing import Any, Optional

from farm_dashboard.models.user import Role, normalize_role


class Section:
    """Dashboard section identifiers."""
    OVERVIEW = "overview"
    SHEEP = "sheep"
    HEALTH = "health"
    EXPENSES = "expenses"
    FINANCE = "finance"
    ANALYTICS = "analytics"
    REPORTS = "reports"
    USERS = "users"


# Order matters: the first entry is where a denied navigation lands
ROLE_SECTIONS: dict[Role, tuple[str, ...]] = {
    Role.VETERINARIAN: (Section.HEALTH,),
    Role.STAFF: (Section.SHEEP, Section.HEALTH, Section.EXPENSES),
    Role.ADMIN: (
        Section.OVERVIEW,
        Section.SHEEP,
        Section.HEALTH,
        Section.FINANCE,
        Section.ANALYTICS,
        Section.REPORTS,
        Section.USERS,
    ),
}

FALLBACK_SECTIONS: tuple[str, ...] = (Section.SHEEP,)

ACCESS_DENIED = "Access Denied"
NAVIGATION_DENIED_NOTICE = "Access denied: You do not have permission to view this section."


@dataclass(frozen=True)
class NavigationDecision:
    """Outcome of a navigation request."""
    section: str
    allowed: bool
    notice: Optional[str] = None


def allowed_sections(role: Any) -> tuple[str, ...]:
    """
    Sections a role may open, in menu order.

    Legacy aliases are normalized first; any other unrecognized role
    gets the fallback set.
    """
    canonical = normalize_role(role)
    if canonical is None:
        return FALLBACK_SECTIONS
    return ROLE_SECTIONS[canonical]


def is_allowed(role: Any, section: str) -> bool:
    """Whether ``role`` may render or mutate ``section``."""
    return section in allowed_sections(role)


def default_section(role: Any) -> str:
    """First section in the role's menu."""
    return allowed_sections(role)[0]


def navigate(role: Any, section: str) -> NavigationDecision:
    """
    Resolve a navigation request.

    Denied requests are redirected to the role's default section and
    carry a notice for the user.
    """
    if is_allowed(role, section):
        return NavigationDecision(section=section, allowed=True)
    return NavigationDecision(
        section=default_section(role),
        allowed=False,
        notice=NAVIGATION_DENIED_NOTICE,
    )
