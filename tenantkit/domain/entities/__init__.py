"""
Domain Entities

All domain entities organized by model.
"""

from .enums import OrganizationRole, OrganizationStatus
from .membership import MemberWithUserInfo, OrganizationMembership, matches_filters, most_relevant
from .organization import Organization
from .user import User

__all__ = [
    # Enums
    "OrganizationRole",
    "OrganizationStatus",
    # Entities
    "User",
    "Organization",
    "OrganizationMembership",
    "MemberWithUserInfo",
    # Helpers
    "matches_filters",
    "most_relevant",
]
