"""
Organization Membership Entity

Links a User (or a username that is not registered yet) to an Organization
with a role.
"""

from datetime import datetime
from typing import List, Optional

from tenantkit.domain.base import DomainModel

from .enums import OrganizationRole
from .organization import Organization
from .user import User


class OrganizationMembership(DomainModel):
    """
    OrganizationMembership entity - join between User and Organization.

    Business Rules:
    - Active iff joined_at is set and both left_at and deleted_at are unset
    - Pending invitation iff invited_at is set and joined_at, left_at, deleted_at are unset
    - At most one active membership per (user_id, organization_id)
    - Exactly one active owner membership per organization
    - user_id is None while the invited username has no registered user
    """

    id: str
    user_id: Optional[str] = None
    username: str
    organization_id: str
    role: OrganizationRole

    invited_at: Optional[datetime] = None
    joined_at: Optional[datetime] = None
    left_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    created_at: datetime
    updated_at: datetime

    @property
    def is_active(self) -> bool:
        return (
            self.joined_at is not None
            and self.left_at is None
            and self.deleted_at is None
        )

    @property
    def is_pending(self) -> bool:
        return (
            self.invited_at is not None
            and self.joined_at is None
            and self.left_at is None
            and self.deleted_at is None
        )

    @property
    def is_removed(self) -> bool:
        return self.left_at is not None or self.deleted_at is not None


class MemberWithUserInfo(OrganizationMembership):
    """Membership joined with its user (None for unregistered invitees) and organization"""

    user: Optional[User] = None
    organization: Organization


def matches_filters(
    membership: OrganizationMembership,
    include_active: bool = True,
    include_pending: bool = False,
    include_removed: bool = False,
) -> bool:
    return (
        (include_active and membership.is_active)
        or (include_pending and membership.is_pending)
        or (include_removed and membership.is_removed)
    )


def most_relevant(
    memberships: List[OrganizationMembership],
) -> Optional[OrganizationMembership]:
    """Active beats pending beats removed; ties go to the latest update"""
    if not memberships:
        return None

    def rank(membership: OrganizationMembership):
        if membership.is_active:
            state = 2
        elif membership.is_pending:
            state = 1
        else:
            state = 0
        return (state, membership.updated_at)

    return max(memberships, key=rank)
