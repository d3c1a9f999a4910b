from abc import ABC, abstractmethod
from typing import List, Optional

from tenantkit.domain.auth import OperationContext
from tenantkit.domain.entities import MemberWithUserInfo, OrganizationMembership
from tenantkit.domain.pagination import PaginatedResult, PaginationOptions


class IOrganizationMembershipRepository(ABC):
    """Organization membership repository interface - application layer"""

    @abstractmethod
    async def find_by_id(self, membership_id: str) -> Optional[OrganizationMembership]:
        """Get membership by ID"""
        pass

    @abstractmethod
    async def find_by_user_and_organization(
        self, user_id: str, organization_id: str
    ) -> Optional[OrganizationMembership]:
        """Get the most relevant membership of a user in an organization"""
        pass

    @abstractmethod
    async def find_by_username_and_organization(
        self, username: str, organization_id: str
    ) -> Optional[OrganizationMembership]:
        """Get membership (or invitation) by username and organization"""
        pass

    @abstractmethod
    async def find_by_organization(
        self, organization_id: str, active_only: bool = False
    ) -> List[OrganizationMembership]:
        """Get all memberships for an organization"""
        pass

    @abstractmethod
    async def find_by_user(self, user_id: str) -> List[OrganizationMembership]:
        """Get all memberships for a user"""
        pass

    @abstractmethod
    async def find_members_paginated(
        self, organization_id: str, options: Optional[PaginationOptions] = None
    ) -> PaginatedResult[MemberWithUserInfo]:
        """
        Page through an organization's members joined with user and organization.

        Filters (combinable):
        - include_active: joined_at set, left_at and deleted_at unset
        - include_pending: invited_at set, joined_at, left_at and deleted_at unset
        - include_removed: left_at or deleted_at set
        """
        pass

    @abstractmethod
    async def insert(
        self, membership: OrganizationMembership, context: Optional[OperationContext] = None
    ) -> OrganizationMembership:
        """Create a new membership"""
        pass

    @abstractmethod
    async def update(
        self, membership: OrganizationMembership, context: Optional[OperationContext] = None
    ) -> OrganizationMembership:
        """Update existing membership"""
        pass

    @abstractmethod
    async def delete(
        self, membership_id: str, context: Optional[OperationContext] = None
    ) -> None:
        """Hard delete a membership row"""
        pass
