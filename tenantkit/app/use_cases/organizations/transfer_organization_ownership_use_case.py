"""
Transfer Organization Ownership Use Case

Hands an organization over to another active member.
"""

from tenantkit.app.services.unit_of_work import RepositoryBundle
from tenantkit.app.use_cases.base import BaseUseCase
from tenantkit.app.use_cases.helpers import (
    ensure_writable,
    get_active_membership,
    get_current_user,
    get_organization,
)
from tenantkit.domain.auth import OperationContext
from tenantkit.domain.entities import Organization, OrganizationRole
from tenantkit.domain.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError

from .dtos import TransferOrganizationOwnershipInput


class TransferOrganizationOwnershipUseCase(
    BaseUseCase[TransferOrganizationOwnershipInput, Organization]
):
    """
    Use case for transferring organization ownership.

    Business Rules:
    - Current owner only
    - Not on deleted or archived organizations
    - New owner must be a different, non-deleted user with an active membership
    - The prior owner's membership is demoted to member and the new owner's
      membership promoted to owner, together with owner_user_id, atomically
    """

    name = "transfer_organization_ownership"
    input_model = TransferOrganizationOwnershipInput

    async def handle(
        self,
        input: TransferOrganizationOwnershipInput,
        repos: RepositoryBundle,
        context: OperationContext,
    ) -> Organization:
        organization = await get_organization(repos, input.organization_id)
        user = await get_current_user(repos, context)

        if organization.owner_user_id != user.id:
            raise ForbiddenError("Only the current organization owner can transfer ownership")

        ensure_writable(organization, "transfer ownership of")

        if input.new_owner_id == organization.owner_user_id:
            raise ValidationError.single(
                "new_owner_id", "New owner must be different from current owner"
            )

        new_owner = await repos.users.find_by_id(input.new_owner_id)
        if new_owner is None or new_owner.is_deleted:
            raise NotFoundError("User", input.new_owner_id)

        new_owner_membership = await get_active_membership(repos, new_owner.id, organization.id)
        if new_owner_membership is None:
            raise ConflictError(
                "New owner does not have an active membership in the organization",
                {"new_owner_id": new_owner.id},
            )

        current_owner_membership = await get_active_membership(repos, user.id, organization.id)
        if current_owner_membership is None:
            raise ConflictError(
                "Current owner does not have an active membership in the organization",
                {"owner_user_id": user.id},
            )

        now = self.now()
        audit = context.with_audit(
            "TRANSFER_ORGANIZATION_OWNERSHIP", organization.id, new_owner_id=new_owner.id
        )

        transferred = organization.model_copy(
            update={"owner_user_id": new_owner.id, "updated_at": now}
        )
        await repos.organizations.update(transferred, audit)
        await repos.organization_memberships.update(
            current_owner_membership.model_copy(
                update={"role": OrganizationRole.member, "updated_at": now}
            ),
            audit,
        )
        await repos.organization_memberships.update(
            new_owner_membership.model_copy(
                update={"role": OrganizationRole.owner, "updated_at": now}
            ),
            audit,
        )
        return transferred
