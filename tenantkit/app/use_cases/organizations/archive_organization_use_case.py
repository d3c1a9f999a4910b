from tenantkit.app.services.unit_of_work import RepositoryBundle
from tenantkit.app.use_cases.base import BaseUseCase
from tenantkit.app.use_cases.helpers import (
    ensure_writable,
    get_actor_role,
    get_current_user,
    get_organization,
)
from tenantkit.domain.auth import OperationContext
from tenantkit.domain.entities import Organization, OrganizationRole, OrganizationStatus
from tenantkit.domain.errors import ForbiddenError

from .dtos import OrganizationIdInput


class ArchiveOrganizationUseCase(BaseUseCase[OrganizationIdInput, Organization]):
    """
    Use case for archiving an organization.

    Business Rules:
    - Owner or active admin only
    - Deleted or already archived organizations cannot be archived
    - Sets status=archived and archived_at
    """

    name = "archive_organization"
    input_model = OrganizationIdInput

    async def handle(
        self, input: OrganizationIdInput, repos: RepositoryBundle, context: OperationContext
    ) -> Organization:
        organization = await get_organization(repos, input.organization_id)
        user = await get_current_user(repos, context)

        role = await get_actor_role(repos, organization, user)
        if role not in (OrganizationRole.owner, OrganizationRole.admin):
            raise ForbiddenError("Only organization owner or admin members can archive organization")

        ensure_writable(organization, "archive")

        now = self.now()
        archived = organization.model_copy(
            update={"status": OrganizationStatus.archived, "archived_at": now, "updated_at": now}
        )
        return await repos.organizations.update(
            archived, context.with_audit("ARCHIVE_ORGANIZATION", organization.id)
        )
