from abc import ABC, abstractmethod
from typing import List, Optional

from tenantkit.domain.auth import OperationContext
from tenantkit.domain.entities import Organization


class IOrganizationRepository(ABC):
    """Organization repository interface - application layer"""

    @abstractmethod
    async def find_by_id(self, organization_id: str) -> Optional[Organization]:
        """Get organization by ID"""
        pass

    @abstractmethod
    async def find_by_owner(self, owner_user_id: str) -> List[Organization]:
        """Get all organizations owned by a user"""
        pass

    @abstractmethod
    async def insert(
        self, organization: Organization, context: Optional[OperationContext] = None
    ) -> Organization:
        """Create a new organization"""
        pass

    @abstractmethod
    async def update(
        self, organization: Organization, context: Optional[OperationContext] = None
    ) -> Organization:
        """Update existing organization"""
        pass

    @abstractmethod
    async def delete(
        self, organization_id: str, context: Optional[OperationContext] = None
    ) -> None:
        """Hard delete an organization row"""
        pass
