from tenantkit.app.services.unit_of_work import RepositoryBundle
from tenantkit.app.use_cases.base import BaseUseCase
from tenantkit.app.use_cases.helpers import (
    ensure_writable,
    get_actor_role,
    get_current_user,
    get_organization,
)
from tenantkit.domain.auth import OperationContext
from tenantkit.domain.entities import OrganizationMembership, OrganizationRole
from tenantkit.domain.errors import ConflictError, ForbiddenError, NotFoundError

from .dtos import RemoveOrganizationMemberInput


class RemoveOrganizationMemberUseCase(
    BaseUseCase[RemoveOrganizationMemberInput, OrganizationMembership]
):
    """
    Use case for removing a member or revoking an invitation.

    Business Rules:
    - Owner may remove anyone but themselves; admins may remove members only
    - Removing the owner is a conflict (transfer ownership first)
    - Target is looked up by user id, or by username for unregistered invitees
    - Soft delete: deleted_at is set
    """

    name = "remove_organization_member"
    input_model = RemoveOrganizationMemberInput

    async def handle(
        self,
        input: RemoveOrganizationMemberInput,
        repos: RepositoryBundle,
        context: OperationContext,
    ) -> OrganizationMembership:
        organization = await get_organization(repos, input.organization_id)
        actor = await get_current_user(repos, context)

        memberships = repos.organization_memberships
        if input.by_username:
            target = await memberships.find_by_username_and_organization(
                input.user_id, organization.id
            )
        else:
            target = await memberships.find_by_user_and_organization(input.user_id, organization.id)
        if target is None or target.is_removed:
            raise NotFoundError("OrganizationMembership", f"{input.user_id}:{organization.id}")

        is_owner_target = (
            target.user_id is not None and target.user_id == organization.owner_user_id
        ) or target.role == OrganizationRole.owner
        if is_owner_target:
            raise ConflictError(
                "Organization owner cannot be removed. Transfer ownership first.",
                {"user_id": input.user_id},
            )

        role = await get_actor_role(repos, organization, actor)
        can_remove = role == OrganizationRole.owner or (
            role == OrganizationRole.admin and target.role == OrganizationRole.member
        )
        if not can_remove:
            raise ForbiddenError("Insufficient permissions to remove this member")

        ensure_writable(organization, "remove members from")

        now = self.now()
        removed = target.model_copy(update={"deleted_at": now, "updated_at": now})
        return await memberships.update(
            removed, context.with_audit("REMOVE_ORGANIZATION_MEMBER", organization.id)
        )
