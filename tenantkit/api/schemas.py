"""
Request section models (path params, query strings and bodies) of the HTTP
routes. Use case inputs are assembled from these after validation.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from tenantkit.domain.entities import OrganizationRole


class OrganizationPath(BaseModel):
    organization_id: str = Field(min_length=1)


class MemberPath(OrganizationPath):
    user_id: str = Field(min_length=1)


class ListMembersQuery(BaseModel):
    page: int = Field(default=1, ge=1)
    page_size: Optional[int] = Field(default=None, ge=1)
    include_active: bool = True
    include_pending: bool = False
    include_removed: bool = False


class RemoveMemberQuery(BaseModel):
    by_username: bool = False


class UpdateOrganizationBody(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)

    @field_validator("name")
    @classmethod
    def name_not_null(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("Organization name cannot be null")
        return v


class TransferOwnershipBody(BaseModel):
    new_owner_id: str = Field(min_length=1)


class AddMemberBody(BaseModel):
    username: str = Field(min_length=1, max_length=255)
    role: OrganizationRole = OrganizationRole.member


class AcceptInvitationBody(BaseModel):
    username: Optional[str] = Field(default=None, min_length=1)


class UpdateRoleBody(BaseModel):
    role: OrganizationRole
