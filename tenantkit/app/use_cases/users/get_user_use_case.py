from tenantkit.app.services.unit_of_work import RepositoryBundle
from tenantkit.app.use_cases.base import BaseUseCase
from tenantkit.app.use_cases.helpers import get_current_user
from tenantkit.domain.auth import OperationContext
from tenantkit.domain.entities import User

from .dtos import CurrentUserInput


class GetUserUseCase(BaseUseCase[CurrentUserInput, User]):
    """Use case for reading the caller's own user record"""

    name = "get_user"
    input_model = CurrentUserInput

    async def handle(
        self, input: CurrentUserInput, repos: RepositoryBundle, context: OperationContext
    ) -> User:
        return await get_current_user(repos, context)
