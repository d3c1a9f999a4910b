"""
Create User Use Case

Registers the authenticated principal as a user.
"""

from tenantkit.app.services.unit_of_work import RepositoryBundle
from tenantkit.app.use_cases.base import BaseUseCase
from tenantkit.domain.auth import OperationContext
from tenantkit.domain.entities import User
from tenantkit.domain.errors import ConflictError

from .dtos import CreateUserInput


class CreateUserUseCase(BaseUseCase[CreateUserInput, User]):
    """
    Use case for registering a user.

    Business Rules:
    - external_id defaults to the principal's subject
    - external_id and username are unique
    - Custom user fields are accepted and stored with the user
    """

    name = "create_user"
    input_model = CreateUserInput

    async def handle(
        self, input: CreateUserInput, repos: RepositoryBundle, context: OperationContext
    ) -> User:
        external_id = input.external_id or context.actor.external_id

        if await repos.users.find_by_external_id(external_id) is not None:
            raise ConflictError(
                "A user is already registered for this identity", {"external_id": external_id}
            )
        if await repos.users.find_by_username(input.username) is not None:
            raise ConflictError("Username is already taken", {"username": input.username})

        now = self.now()
        user = User(
            id=self.new_id(),
            external_id=external_id,
            username=input.username,
            created_at=now,
            updated_at=now,
            **self.input_schema.split_custom(input.model_dump()),
        )
        return await repos.users.insert(user, context.with_audit("CREATE_USER"))
