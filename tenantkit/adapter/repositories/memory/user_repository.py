from typing import Optional

from tenantkit.adapter.repositories.errors import translate_errors
from tenantkit.adapter.repositories.memory.base import InMemoryRepository
from tenantkit.app.repositories.user_repository import IUserRepository
from tenantkit.domain.auth import OperationContext
from tenantkit.domain.entities import User
from tenantkit.domain.schema import MergedSchema


class InMemoryUserRepository(InMemoryRepository[User], IUserRepository):
    """User repository implementation over an in-memory dict"""

    def __init__(self, schema: MergedSchema):
        super().__init__(schema, User)

    @translate_errors
    async def find_by_id(self, user_id: str) -> Optional[User]:
        return self.get(user_id)

    @translate_errors
    async def find_by_external_id(self, external_id: str) -> Optional[User]:
        matches = self.select(lambda user: user.external_id == external_id)
        return matches[0] if matches else None

    @translate_errors
    async def find_by_username(self, username: str) -> Optional[User]:
        matches = self.select(lambda user: user.username == username)
        return matches[0] if matches else None

    @translate_errors
    async def insert(self, user: User, context: Optional[OperationContext] = None) -> User:
        return self.put_new(user)

    @translate_errors
    async def update(self, user: User, context: Optional[OperationContext] = None) -> User:
        return self.replace(user)

    @translate_errors
    async def delete(self, user_id: str, context: Optional[OperationContext] = None) -> None:
        self.remove(user_id)
