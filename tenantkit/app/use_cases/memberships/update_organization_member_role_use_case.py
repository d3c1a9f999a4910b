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

from .dtos import UpdateOrganizationMemberRoleInput


class UpdateOrganizationMemberRoleUseCase(
    BaseUseCase[UpdateOrganizationMemberRoleInput, OrganizationMembership]
):
    """
    Use case for changing a member's role.

    Business Rules:
    - Owner may assign admin or member; admins may assign member only
    - The owner's role cannot be changed and owner cannot be assigned
      (transfer ownership instead)
    - Target membership must be active or pending
    - Not on deleted or archived organizations
    """

    name = "update_organization_member_role"
    input_model = UpdateOrganizationMemberRoleInput

    async def handle(
        self,
        input: UpdateOrganizationMemberRoleInput,
        repos: RepositoryBundle,
        context: OperationContext,
    ) -> OrganizationMembership:
        organization = await get_organization(repos, input.organization_id)
        actor = await get_current_user(repos, context)

        target = await repos.organization_memberships.find_by_user_and_organization(
            input.user_id, organization.id
        )
        if target is None or target.is_removed:
            raise NotFoundError("OrganizationMembership", f"{input.user_id}:{organization.id}")

        if organization.owner_user_id == input.user_id or target.role == OrganizationRole.owner:
            raise ConflictError(
                "Organization owner role cannot be changed. Use transfer ownership instead.",
                {"user_id": input.user_id},
            )

        role = await get_actor_role(repos, organization, actor)
        can_assign = role == OrganizationRole.owner or (
            role == OrganizationRole.admin and input.role == OrganizationRole.member
        )
        if not can_assign:
            raise ForbiddenError("Insufficient permissions to assign this role")

        if input.role == OrganizationRole.owner:
            raise ConflictError(
                "Owner role cannot be assigned. Use transfer ownership instead.",
                {"user_id": input.user_id},
            )

        ensure_writable(organization, "update member roles in")

        updated = target.model_copy(update={"role": input.role, "updated_at": self.now()})
        return await repos.organization_memberships.update(
            updated, context.with_audit("UPDATE_ORGANIZATION_MEMBER_ROLE", organization.id)
        )
