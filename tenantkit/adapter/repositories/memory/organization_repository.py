from typing import List, Optional

from tenantkit.adapter.repositories.errors import translate_errors
from tenantkit.adapter.repositories.memory.base import InMemoryRepository
from tenantkit.app.repositories.organization_repository import IOrganizationRepository
from tenantkit.domain.auth import OperationContext
from tenantkit.domain.entities import Organization
from tenantkit.domain.schema import MergedSchema


class InMemoryOrganizationRepository(InMemoryRepository[Organization], IOrganizationRepository):
    """Organization repository implementation over an in-memory dict"""

    def __init__(self, schema: MergedSchema):
        super().__init__(schema, Organization)

    @translate_errors
    async def find_by_id(self, organization_id: str) -> Optional[Organization]:
        return self.get(organization_id)

    @translate_errors
    async def find_by_owner(self, owner_user_id: str) -> List[Organization]:
        return self.select(lambda organization: organization.owner_user_id == owner_user_id)

    @translate_errors
    async def insert(
        self, organization: Organization, context: Optional[OperationContext] = None
    ) -> Organization:
        return self.put_new(organization)

    @translate_errors
    async def update(
        self, organization: Organization, context: Optional[OperationContext] = None
    ) -> Organization:
        return self.replace(organization)

    @translate_errors
    async def delete(
        self, organization_id: str, context: Optional[OperationContext] = None
    ) -> None:
        self.remove(organization_id)
