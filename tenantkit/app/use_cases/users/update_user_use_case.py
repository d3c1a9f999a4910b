"""
Update User Use Case

Changes the caller's username and custom fields.
"""

from tenantkit.app.services.unit_of_work import RepositoryBundle
from tenantkit.app.use_cases.base import BaseUseCase
from tenantkit.app.use_cases.helpers import get_current_user
from tenantkit.domain.auth import OperationContext
from tenantkit.domain.entities import User
from tenantkit.domain.errors import ConflictError, ValidationError
from tenantkit.domain.schema import ROOT_PATH

from .dtos import UpdateUserInput


class UpdateUserUseCase(BaseUseCase[UpdateUserInput, User]):
    """
    Use case for updating the caller's user record.

    Business Rules:
    - At least one field must be provided
    - A new username must not be taken by another user
    - Omitted fields keep their current values
    """

    name = "update_user"
    input_model = UpdateUserInput
    partial_input = True

    async def handle(
        self, input: UpdateUserInput, repos: RepositoryBundle, context: OperationContext
    ) -> User:
        changes = input.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationError.single(ROOT_PATH, "At least one field must be provided for update")

        user = await get_current_user(repos, context)

        username = changes.get("username")
        if username is not None and username != user.username:
            existing = await repos.users.find_by_username(username)
            if existing is not None and existing.id != user.id:
                raise ConflictError("Username is already taken", {"username": username})

        updated = User.model_validate({**user.model_dump(), **changes, "updated_at": self.now()})
        return await repos.users.update(updated, context.with_audit("UPDATE_USER"))
