"""
Delete User Use Case

Soft-deletes the caller and cascades to owned organizations and memberships.
"""

from tenantkit.app.services.unit_of_work import RepositoryBundle
from tenantkit.app.use_cases.base import BaseUseCase
from tenantkit.app.use_cases.helpers import get_current_user
from tenantkit.domain.auth import OperationContext
from tenantkit.domain.entities import User

from .dtos import CurrentUserInput


class DeleteUserUseCase(BaseUseCase[CurrentUserInput, User]):
    """
    Use case for deleting the caller's account.

    Business Rules:
    - Soft delete: deleted_at is set, the row is kept
    - Organizations owned by the user are soft-deleted, their memberships untouched
    - Active memberships in other organizations are marked left and deleted
    - Everything happens in one transaction
    """

    name = "delete_user"
    input_model = CurrentUserInput

    async def handle(
        self, input: CurrentUserInput, repos: RepositoryBundle, context: OperationContext
    ) -> User:
        user = await get_current_user(repos, context)
        audit = context.with_audit("DELETE_USER")
        now = self.now()

        deleted_user = user.model_copy(update={"deleted_at": now, "updated_at": now})
        await repos.users.update(deleted_user, audit)

        owned = await repos.organizations.find_by_owner(user.id)
        owned_ids = {organization.id for organization in owned}
        for organization in owned:
            if organization.is_deleted:
                continue
            await repos.organizations.update(
                organization.model_copy(update={"deleted_at": now, "updated_at": now}),
                audit.with_audit("DELETE_USER", organization.id),
            )

        for membership in await repos.organization_memberships.find_by_user(user.id):
            if membership.organization_id in owned_ids or membership.is_removed:
                continue
            await repos.organization_memberships.update(
                membership.model_copy(
                    update={"left_at": now, "deleted_at": now, "updated_at": now}
                ),
                audit.with_audit("DELETE_USER", membership.organization_id),
            )

        return deleted_user
