"""
Organization Membership Use Cases

All membership-related business logic.
"""

from .accept_organization_invitation_use_case import AcceptOrganizationInvitationUseCase
from .add_organization_member_use_case import AddOrganizationMemberUseCase
from .dtos import (
    AcceptOrganizationInvitationInput,
    AddOrganizationMemberInput,
    LeaveOrganizationInput,
    RemoveOrganizationMemberInput,
    UpdateOrganizationMemberRoleInput,
)
from .leave_organization_use_case import LeaveOrganizationUseCase
from .remove_organization_member_use_case import RemoveOrganizationMemberUseCase
from .update_organization_member_role_use_case import UpdateOrganizationMemberRoleUseCase

__all__ = [
    "AddOrganizationMemberUseCase",
    "AcceptOrganizationInvitationUseCase",
    "UpdateOrganizationMemberRoleUseCase",
    "RemoveOrganizationMemberUseCase",
    "LeaveOrganizationUseCase",
    "AddOrganizationMemberInput",
    "AcceptOrganizationInvitationInput",
    "UpdateOrganizationMemberRoleInput",
    "RemoveOrganizationMemberInput",
    "LeaveOrganizationInput",
]
