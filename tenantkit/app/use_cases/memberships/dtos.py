"""
Membership Use Case DTOs (Data Transfer Objects)

Input models of the organization membership use cases.
"""

from typing import Optional

from pydantic import BaseModel, Field

from tenantkit.domain.entities import OrganizationRole


# ============================================================================
# Input DTOs
# ============================================================================


class AddOrganizationMemberInput(BaseModel):
    """Input for add organization member use case"""

    organization_id: str = Field(min_length=1)
    username: str = Field(min_length=1, max_length=255)
    role: OrganizationRole = OrganizationRole.member


class AcceptOrganizationInvitationInput(BaseModel):
    """Input for accept invitation use case (username defaults to the caller's)"""

    organization_id: str = Field(min_length=1)
    username: Optional[str] = Field(default=None, min_length=1)


class UpdateOrganizationMemberRoleInput(BaseModel):
    """Input for update member role use case"""

    organization_id: str = Field(min_length=1)
    user_id: str = Field(min_length=1)
    role: OrganizationRole


class RemoveOrganizationMemberInput(BaseModel):
    """Input for remove member use case; by_username targets unregistered invitees"""

    organization_id: str = Field(min_length=1)
    user_id: str = Field(min_length=1)
    by_username: bool = False


class LeaveOrganizationInput(BaseModel):
    """Input for leave organization use case"""

    organization_id: str = Field(min_length=1)
