from abc import ABC, abstractmethod
from typing import Optional

from tenantkit.domain.auth import OperationContext
from tenantkit.domain.entities import User


class IUserRepository(ABC):
    """User repository interface - application layer"""

    @abstractmethod
    async def find_by_id(self, user_id: str) -> Optional[User]:
        """Get user by ID"""
        pass

    @abstractmethod
    async def find_by_external_id(self, external_id: str) -> Optional[User]:
        """Get user by auth provider subject"""
        pass

    @abstractmethod
    async def find_by_username(self, username: str) -> Optional[User]:
        """Get user by username"""
        pass

    @abstractmethod
    async def insert(self, user: User, context: Optional[OperationContext] = None) -> User:
        """Create a new user"""
        pass

    @abstractmethod
    async def update(self, user: User, context: Optional[OperationContext] = None) -> User:
        """Update existing user"""
        pass

    @abstractmethod
    async def delete(self, user_id: str, context: Optional[OperationContext] = None) -> None:
        """Hard delete a user row"""
        pass
