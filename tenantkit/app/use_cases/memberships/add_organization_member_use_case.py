"""
Add Organization Member Use Case

Invites a user, registered or not yet, to an organization by username.
"""

from typing import Optional

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
from tenantkit.domain.errors import ConflictError, ForbiddenError

from .dtos import AddOrganizationMemberInput


class AddOrganizationMemberUseCase(
    BaseUseCase[AddOrganizationMemberInput, OrganizationMembership]
):
    """
    Use case for inviting a member to an organization.

    Business Rules:
    - Owner may add admins and members; admins may add members only
    - An organization has exactly one owner: adding an owner is a conflict
    - Not on deleted or archived organizations
    - An active or pending membership for the username is a conflict
    - A previously left membership is re-invited with the requested role
    - Creates a pending invitation (invited_at set, joined_at unset)
    - Custom membership fields are accepted and stored with the membership
    """

    name = "add_organization_member"
    input_model = AddOrganizationMemberInput

    async def handle(
        self, input: AddOrganizationMemberInput, repos: RepositoryBundle, context: OperationContext
    ) -> OrganizationMembership:
        organization = await get_organization(repos, input.organization_id)
        actor = await get_current_user(repos, context)

        role = await get_actor_role(repos, organization, actor)
        can_add = role == OrganizationRole.owner or (
            role == OrganizationRole.admin and input.role == OrganizationRole.member
        )
        if not can_add:
            raise ForbiddenError("Only organization owners and admins can add members")

        if input.role == OrganizationRole.owner:
            raise ConflictError(
                "Organization already has an owner, transfer ownership instead",
                {"organization_id": organization.id},
            )

        ensure_writable(organization, "add members to")

        target_user = await repos.users.find_by_username(input.username)
        existing: Optional[OrganizationMembership] = None
        if target_user is not None:
            existing = await repos.organization_memberships.find_by_user_and_organization(
                target_user.id, organization.id
            )
        if existing is None:
            # Invitations sent before the user registered carry no user_id
            existing = await repos.organization_memberships.find_by_username_and_organization(
                input.username, organization.id
            )

        if existing is not None and (existing.is_active or existing.is_pending):
            raise ConflictError(
                "User is already a member of this organization",
                {"username": input.username, "organization_id": organization.id},
            )

        now = self.now()
        audit = context.with_audit("ADD_ORGANIZATION_MEMBER", organization.id)
        custom = self.input_schema.split_custom(input.model_dump())

        if existing is not None and existing.left_at is not None and existing.deleted_at is None:
            reinvited = existing.model_copy(
                update={
                    **custom,
                    "user_id": target_user.id if target_user else existing.user_id,
                    "role": input.role,
                    "invited_at": now,
                    "joined_at": None,
                    "left_at": None,
                    "updated_at": now,
                }
            )
            return await repos.organization_memberships.update(reinvited, audit)

        membership = OrganizationMembership(
            id=self.new_id(),
            user_id=target_user.id if target_user else None,
            username=input.username,
            organization_id=organization.id,
            role=input.role,
            invited_at=now,
            created_at=now,
            updated_at=now,
            **custom,
        )
        return await repos.organization_memberships.insert(membership, audit)
