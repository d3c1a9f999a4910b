"""
Create Organization Use Case

Creates an organization owned by the caller together with the owner membership.
"""

from tenantkit.app.services.unit_of_work import RepositoryBundle
from tenantkit.app.use_cases.base import BaseUseCase
from tenantkit.app.use_cases.helpers import get_current_user
from tenantkit.domain.auth import OperationContext
from tenantkit.domain.entities import (
    Organization,
    OrganizationMembership,
    OrganizationRole,
    OrganizationStatus,
)

from .dtos import CreateOrganizationInput


class CreateOrganizationUseCase(BaseUseCase[CreateOrganizationInput, Organization]):
    """
    Use case for creating an organization.

    Business Rules:
    - The caller becomes owner_user_id
    - An active owner membership is created in the same transaction
    - Custom organization fields are accepted and stored with the organization
    """

    name = "create_organization"
    input_model = CreateOrganizationInput

    async def handle(
        self, input: CreateOrganizationInput, repos: RepositoryBundle, context: OperationContext
    ) -> Organization:
        user = await get_current_user(repos, context)
        now = self.now()

        organization = Organization(
            id=self.new_id(),
            name=input.name,
            owner_user_id=user.id,
            status=OrganizationStatus.active,
            created_at=now,
            updated_at=now,
            **self.input_schema.split_custom(input.model_dump()),
        )
        audit = context.with_audit("CREATE_ORGANIZATION", organization.id)
        await repos.organizations.insert(organization, audit)

        owner_membership = OrganizationMembership(
            id=self.new_id(),
            user_id=user.id,
            username=user.username,
            organization_id=organization.id,
            role=OrganizationRole.owner,
            invited_at=now,
            joined_at=now,
            created_at=now,
            updated_at=now,
        )
        await repos.organization_memberships.insert(owner_membership, audit)

        return organization
