"""
User Management Use Cases

All user-related business logic. Every use case acts on the caller.
"""

from .create_user_use_case import CreateUserUseCase
from .delete_user_use_case import DeleteUserUseCase
from .dtos import CreateUserInput, CurrentUserInput, UpdateUserInput
from .get_user_use_case import GetUserUseCase
from .list_user_organizations_use_case import ListUserOrganizationsUseCase
from .update_user_use_case import UpdateUserUseCase

__all__ = [
    "CreateUserUseCase",
    "GetUserUseCase",
    "UpdateUserUseCase",
    "DeleteUserUseCase",
    "ListUserOrganizationsUseCase",
    "CreateUserInput",
    "UpdateUserInput",
    "CurrentUserInput",
]
