"""
Update Organization Use Case

Changes an organization's name and custom fields.
"""

from tenantkit.app.services.unit_of_work import RepositoryBundle
from tenantkit.app.use_cases.base import BaseUseCase
from tenantkit.app.use_cases.helpers import (
    ensure_writable,
    get_actor_role,
    get_current_user,
    get_organization,
)
from tenantkit.domain.auth import OperationContext
from tenantkit.domain.entities import Organization, OrganizationRole
from tenantkit.domain.errors import ForbiddenError, ValidationError
from tenantkit.domain.schema import ROOT_PATH

from .dtos import UpdateOrganizationInput


class UpdateOrganizationUseCase(BaseUseCase[UpdateOrganizationInput, Organization]):
    """
    Use case for updating an organization.

    Business Rules:
    - At least one field besides organization_id must be provided
    - Owner or active admin only
    - Deleted and archived organizations cannot be updated
    """

    name = "update_organization"
    input_model = UpdateOrganizationInput
    partial_input = True

    async def handle(
        self, input: UpdateOrganizationInput, repos: RepositoryBundle, context: OperationContext
    ) -> Organization:
        changes = input.model_dump(exclude_unset=True)
        changes.pop("organization_id", None)
        if not changes:
            raise ValidationError.single(ROOT_PATH, "At least one field must be provided for update")

        organization = await get_organization(repos, input.organization_id)
        user = await get_current_user(repos, context)

        role = await get_actor_role(repos, organization, user)
        if role not in (OrganizationRole.owner, OrganizationRole.admin):
            raise ForbiddenError("Only organization owner or admin members can update organization")

        ensure_writable(organization, "update")

        updated = Organization.model_validate(
            {**organization.model_dump(), **changes, "updated_at": self.now()}
        )
        return await repos.organizations.update(
            updated, context.with_audit("UPDATE_ORGANIZATION", organization.id)
        )
