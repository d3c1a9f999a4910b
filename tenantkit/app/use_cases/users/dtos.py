"""
User Use Case DTOs (Data Transfer Objects)

Input models of the user use cases. Custom user fields are merged into the
create/update inputs at construction time.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


# ============================================================================
# Input DTOs
# ============================================================================


class CreateUserInput(BaseModel):
    """Input for create user use case"""

    username: str = Field(min_length=1, max_length=255)
    # Defaults to the authenticated principal's subject
    external_id: Optional[str] = Field(default=None, min_length=1)


class UpdateUserInput(BaseModel):
    """Input for update user use case (only provided fields change)"""

    username: Optional[str] = Field(default=None, min_length=1, max_length=255)

    # Omitting username keeps it; an explicit null is rejected
    @field_validator("username")
    @classmethod
    def username_not_null(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("Username cannot be null")
        return v


class CurrentUserInput(BaseModel):
    """Input for use cases acting on the caller only"""
