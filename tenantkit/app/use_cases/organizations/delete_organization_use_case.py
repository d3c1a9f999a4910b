from tenantkit.app.services.unit_of_work import RepositoryBundle
from tenantkit.app.use_cases.base import BaseUseCase
from tenantkit.app.use_cases.helpers import ensure_not_deleted, get_current_user, get_organization
from tenantkit.domain.auth import OperationContext
from tenantkit.domain.entities import Organization
from tenantkit.domain.errors import ForbiddenError

from .dtos import OrganizationIdInput


class DeleteOrganizationUseCase(BaseUseCase[OrganizationIdInput, Organization]):
    """
    Use case for deleting an organization.

    Business Rules:
    - Owner only
    - Soft delete; memberships are left untouched
    - Deleting an already deleted organization is a conflict
    """

    name = "delete_organization"
    input_model = OrganizationIdInput

    async def handle(
        self, input: OrganizationIdInput, repos: RepositoryBundle, context: OperationContext
    ) -> Organization:
        organization = await get_organization(repos, input.organization_id)
        user = await get_current_user(repos, context)

        if organization.owner_user_id != user.id:
            raise ForbiddenError("Only the organization owner can delete the organization")

        ensure_not_deleted(organization, "delete")

        now = self.now()
        deleted = organization.model_copy(update={"deleted_at": now, "updated_at": now})
        return await repos.organizations.update(
            deleted, context.with_audit("DELETE_ORGANIZATION", organization.id)
        )
