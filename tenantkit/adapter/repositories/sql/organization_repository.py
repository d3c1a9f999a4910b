from typing import List, Optional

from sqlalchemy import Table
from sqlmodel.ext.asyncio.session import AsyncSession

from tenantkit.adapter.repositories.errors import translate_errors
from tenantkit.adapter.repositories.sql.base import SqlRepository
from tenantkit.app.repositories.organization_repository import IOrganizationRepository
from tenantkit.domain.auth import OperationContext
from tenantkit.domain.entities import Organization
from tenantkit.domain.schema import MergedSchema


class SqlOrganizationRepository(SqlRepository[Organization], IOrganizationRepository):
    """Organization repository implementation using SQLAlchemy Core"""

    def __init__(self, session: AsyncSession, table: Table, schema: MergedSchema):
        super().__init__(session, table, schema, Organization)

    @translate_errors
    async def find_by_id(self, organization_id: str) -> Optional[Organization]:
        """Get organization by ID"""
        return await self.fetch_one(self.column("id") == organization_id)

    @translate_errors
    async def find_by_owner(self, owner_user_id: str) -> List[Organization]:
        """Get all organizations owned by a user"""
        return await self.fetch_all(
            self.column("owner_user_id") == owner_user_id,
            order_by=(self.column("created_at"),),
        )

    @translate_errors
    async def insert(
        self, organization: Organization, context: Optional[OperationContext] = None
    ) -> Organization:
        return await self.insert_entity(organization)

    @translate_errors
    async def update(
        self, organization: Organization, context: Optional[OperationContext] = None
    ) -> Organization:
        return await self.update_entity(organization)

    @translate_errors
    async def delete(
        self, organization_id: str, context: Optional[OperationContext] = None
    ) -> None:
        await self.delete_by_id(organization_id)
