from tenantkit.app.services.unit_of_work import RepositoryBundle
from tenantkit.app.use_cases.base import BaseUseCase
from tenantkit.app.use_cases.helpers import ensure_not_deleted, get_current_user, get_organization
from tenantkit.domain.auth import OperationContext
from tenantkit.domain.entities import Organization, OrganizationStatus
from tenantkit.domain.errors import ConflictError, ForbiddenError

from .dtos import OrganizationIdInput


class RestoreOrganizationUseCase(BaseUseCase[OrganizationIdInput, Organization]):
    """
    Use case for restoring an archived organization.

    Business Rules:
    - Owner only
    - Organization must be archived and not deleted
    - Clears archived_at and sets status=active
    """

    name = "restore_organization"
    input_model = OrganizationIdInput

    async def handle(
        self, input: OrganizationIdInput, repos: RepositoryBundle, context: OperationContext
    ) -> Organization:
        organization = await get_organization(repos, input.organization_id)
        user = await get_current_user(repos, context)

        if organization.owner_user_id != user.id:
            raise ForbiddenError("Only the organization owner can restore the organization")

        ensure_not_deleted(organization, "restore")
        if not organization.is_archived:
            raise ConflictError(
                "Organization is not archived", {"organization_id": organization.id}
            )

        restored = organization.model_copy(
            update={
                "status": OrganizationStatus.active,
                "archived_at": None,
                "updated_at": self.now(),
            }
        )
        return await repos.organizations.update(
            restored, context.with_audit("RESTORE_ORGANIZATION", organization.id)
        )
