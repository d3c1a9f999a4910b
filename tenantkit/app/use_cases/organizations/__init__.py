"""
Organization Management Use Cases

All organization-related business logic.
"""

from .archive_organization_use_case import ArchiveOrganizationUseCase
from .create_organization_use_case import CreateOrganizationUseCase
from .delete_organization_use_case import DeleteOrganizationUseCase
from .dtos import (
    CreateOrganizationInput,
    ListOrganizationMembersInput,
    OrganizationIdInput,
    TransferOrganizationOwnershipInput,
    UpdateOrganizationInput,
)
from .get_organization_use_case import GetOrganizationUseCase
from .list_organization_members_use_case import ListOrganizationMembersUseCase
from .restore_organization_use_case import RestoreOrganizationUseCase
from .transfer_organization_ownership_use_case import TransferOrganizationOwnershipUseCase
from .update_organization_use_case import UpdateOrganizationUseCase

__all__ = [
    "CreateOrganizationUseCase",
    "GetOrganizationUseCase",
    "UpdateOrganizationUseCase",
    "DeleteOrganizationUseCase",
    "ArchiveOrganizationUseCase",
    "RestoreOrganizationUseCase",
    "TransferOrganizationOwnershipUseCase",
    "ListOrganizationMembersUseCase",
    "CreateOrganizationInput",
    "UpdateOrganizationInput",
    "OrganizationIdInput",
    "TransferOrganizationOwnershipInput",
    "ListOrganizationMembersInput",
]
