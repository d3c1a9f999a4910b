from tenantkit.app.services.unit_of_work import RepositoryBundle
from tenantkit.app.use_cases.base import BaseUseCase
from tenantkit.app.use_cases.helpers import ensure_writable, get_current_user, get_organization
from tenantkit.domain.auth import OperationContext
from tenantkit.domain.entities import OrganizationMembership
from tenantkit.domain.errors import ConflictError, ForbiddenError, NotFoundError

from .dtos import AcceptOrganizationInvitationInput


class AcceptOrganizationInvitationUseCase(
    BaseUseCase[AcceptOrganizationInvitationInput, OrganizationMembership]
):
    """
    Use case for accepting a pending invitation.

    Business Rules:
    - Callers can only accept invitations sent to their own username
    - The invitation must be pending (not joined, left or revoked)
    - Links the membership to the caller's user and sets joined_at
    """

    name = "accept_organization_invitation"
    input_model = AcceptOrganizationInvitationInput

    async def handle(
        self,
        input: AcceptOrganizationInvitationInput,
        repos: RepositoryBundle,
        context: OperationContext,
    ) -> OrganizationMembership:
        user = await get_current_user(repos, context)
        username = input.username or user.username
        if username != user.username:
            raise ForbiddenError("You can only accept invitations sent to your username")

        organization = await get_organization(repos, input.organization_id)
        ensure_writable(organization, "join")

        invitation = await repos.organization_memberships.find_by_username_and_organization(
            username, organization.id
        )
        if invitation is None:
            raise NotFoundError("OrganizationInvitation", f"{username}:{organization.id}")
        if not invitation.is_pending:
            raise ConflictError(
                "No pending invitation found for this organization",
                {"organization_id": organization.id},
            )

        now = self.now()
        accepted = invitation.model_copy(
            update={"user_id": user.id, "joined_at": now, "updated_at": now}
        )
        return await repos.organization_memberships.update(
            accepted, context.with_audit("ACCEPT_ORGANIZATION_INVITATION", organization.id)
        )
