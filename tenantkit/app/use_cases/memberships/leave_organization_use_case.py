from tenantkit.app.services.unit_of_work import RepositoryBundle
from tenantkit.app.use_cases.base import BaseUseCase
from tenantkit.app.use_cases.helpers import (
    ensure_not_deleted,
    get_active_membership,
    get_current_user,
    get_organization,
)
from tenantkit.domain.auth import OperationContext
from tenantkit.domain.entities import OrganizationMembership
from tenantkit.domain.errors import ConflictError, NotFoundError

from .dtos import LeaveOrganizationInput


class LeaveOrganizationUseCase(BaseUseCase[LeaveOrganizationInput, OrganizationMembership]):
    """
    Use case for leaving an organization.

    Business Rules:
    - Caller must have an active membership
    - The owner cannot leave (transfer ownership first)
    - Sets left_at; the membership can later be re-invited
    """

    name = "leave_organization"
    input_model = LeaveOrganizationInput

    async def handle(
        self, input: LeaveOrganizationInput, repos: RepositoryBundle, context: OperationContext
    ) -> OrganizationMembership:
        organization = await get_organization(repos, input.organization_id)
        user = await get_current_user(repos, context)
        ensure_not_deleted(organization, "leave")

        membership = await get_active_membership(repos, user.id, organization.id)
        if membership is None:
            raise NotFoundError("OrganizationMembership", f"{user.id}:{organization.id}")

        if organization.owner_user_id == user.id:
            raise ConflictError(
                "Organization owner cannot leave. Transfer ownership first.",
                {"organization_id": organization.id},
            )

        now = self.now()
        left = membership.model_copy(update={"left_at": now, "updated_at": now})
        return await repos.organization_memberships.update(
            left, context.with_audit("LEAVE_ORGANIZATION", organization.id)
        )
