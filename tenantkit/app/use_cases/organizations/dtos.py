"""
Organization Use Case DTOs (Data Transfer Objects)

Input models of the organization use cases. Custom organization fields are
merged into the create/update inputs at construction time.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


# ============================================================================
# Input DTOs
# ============================================================================


class OrganizationIdInput(BaseModel):
    """Input for use cases targeting one organization"""

    organization_id: str = Field(min_length=1)


class CreateOrganizationInput(BaseModel):
    """Input for create organization use case"""

    name: str = Field(min_length=1, max_length=255)


class UpdateOrganizationInput(OrganizationIdInput):
    """Input for update organization use case (only provided fields change)"""

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)

    @field_validator("name")
    @classmethod
    def name_not_null(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("Organization name cannot be null")
        return v


class TransferOrganizationOwnershipInput(OrganizationIdInput):
    """Input for transfer ownership use case"""

    new_owner_id: str = Field(min_length=1)


class ListOrganizationMembersInput(OrganizationIdInput):
    """Input for list organization members use case"""

    page: int = Field(default=1, ge=1)
    page_size: Optional[int] = Field(default=None, ge=1)
    include_active: bool = True
    include_pending: bool = False
    include_removed: bool = False
