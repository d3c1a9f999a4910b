"""
Organization Entity

Represents a tenant container owned by exactly one user.
"""

from datetime import datetime
from typing import Optional

from tenantkit.domain.base import DomainModel

from .enums import OrganizationStatus


class Organization(DomainModel):
    """
    Organization entity - tenant container.

    Business Rules:
    - owner_user_id references the user holding the only active owner membership
    - Archived organizations are read-only until restored
    - Soft delete: deleted_at marks deletion, a deleted organization is not recoverable
    """

    id: str
    name: str
    owner_user_id: str
    status: OrganizationStatus = OrganizationStatus.active

    created_at: datetime
    updated_at: datetime
    archived_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def is_archived(self) -> bool:
        return self.status == OrganizationStatus.archived or self.archived_at is not None
