"""
Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class OrganizationStatus(str, Enum):
    """Organization lifecycle status"""

    active = "active"
    archived = "archived"


class OrganizationRole(str, Enum):
    """User role within an organization"""

    owner = "owner"
    admin = "admin"
    member = "member"
