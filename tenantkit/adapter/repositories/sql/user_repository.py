from typing import Optional

from sqlalchemy import Table
from sqlmodel.ext.asyncio.session import AsyncSession

from tenantkit.adapter.repositories.errors import translate_errors
from tenantkit.adapter.repositories.sql.base import SqlRepository
from tenantkit.app.repositories.user_repository import IUserRepository
from tenantkit.domain.auth import OperationContext
from tenantkit.domain.entities import User
from tenantkit.domain.schema import MergedSchema


class SqlUserRepository(SqlRepository[User], IUserRepository):
    """User repository implementation using SQLAlchemy Core"""

    def __init__(self, session: AsyncSession, table: Table, schema: MergedSchema):
        super().__init__(session, table, schema, User)

    @translate_errors
    async def find_by_id(self, user_id: str) -> Optional[User]:
        """Get user by ID"""
        return await self.fetch_one(self.column("id") == user_id)

    @translate_errors
    async def find_by_external_id(self, external_id: str) -> Optional[User]:
        """Get user by auth provider subject"""
        return await self.fetch_one(self.column("external_id") == external_id)

    @translate_errors
    async def find_by_username(self, username: str) -> Optional[User]:
        """Get user by username"""
        return await self.fetch_one(self.column("username") == username)

    @translate_errors
    async def insert(self, user: User, context: Optional[OperationContext] = None) -> User:
        return await self.insert_entity(user)

    @translate_errors
    async def update(self, user: User, context: Optional[OperationContext] = None) -> User:
        return await self.update_entity(user)

    @translate_errors
    async def delete(self, user_id: str, context: Optional[OperationContext] = None) -> None:
        await self.delete_by_id(user_id)
