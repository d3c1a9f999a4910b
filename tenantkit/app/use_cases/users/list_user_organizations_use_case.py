from typing import Dict, List

from tenantkit.app.services.unit_of_work import RepositoryBundle
from tenantkit.app.use_cases.base import BaseUseCase
from tenantkit.app.use_cases.helpers import get_current_user
from tenantkit.domain.auth import OperationContext
from tenantkit.domain.entities import Organization

from .dtos import CurrentUserInput


class ListUserOrganizationsUseCase(BaseUseCase[CurrentUserInput, List[Organization]]):
    """
    Use case for listing the organizations the caller belongs to.

    Business Rules:
    - Organizations with an active membership, plus organizations the user owns
    - Deleted organizations are excluded, each organization appears once
    """

    name = "list_user_organizations"
    input_model = CurrentUserInput

    async def handle(
        self, input: CurrentUserInput, repos: RepositoryBundle, context: OperationContext
    ) -> List[Organization]:
        user = await get_current_user(repos, context)

        organizations: Dict[str, Organization] = {}
        for membership in await repos.organization_memberships.find_by_user(user.id):
            if not membership.is_active or membership.organization_id in organizations:
                continue
            organization = await repos.organizations.find_by_id(membership.organization_id)
            if organization is not None and not organization.is_deleted:
                organizations[organization.id] = organization

        for organization in await repos.organizations.find_by_owner(user.id):
            if not organization.is_deleted:
                organizations.setdefault(organization.id, organization)

        return list(organizations.values())
