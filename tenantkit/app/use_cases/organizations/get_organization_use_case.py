from tenantkit.app.services.unit_of_work import RepositoryBundle
from tenantkit.app.use_cases.base import BaseUseCase
from tenantkit.app.use_cases.helpers import get_actor_role, get_current_user, get_organization
from tenantkit.domain.auth import OperationContext
from tenantkit.domain.entities import Organization
from tenantkit.domain.errors import ForbiddenError, NotFoundError

from .dtos import OrganizationIdInput


class GetOrganizationUseCase(BaseUseCase[OrganizationIdInput, Organization]):
    """
    Use case for reading an organization.

    Business Rules:
    - Owner or active members only
    - Deleted organizations are reported as not found
    """

    name = "get_organization"
    input_model = OrganizationIdInput

    async def handle(
        self, input: OrganizationIdInput, repos: RepositoryBundle, context: OperationContext
    ) -> Organization:
        organization = await get_organization(repos, input.organization_id)
        if organization.is_deleted:
            raise NotFoundError("Organization", input.organization_id)

        user = await get_current_user(repos, context)
        if await get_actor_role(repos, organization, user) is None:
            raise ForbiddenError(
                "Only organization owner or active organization members can access organization details"
            )
        return organization
