"""
User Entity

Represents a person known to the auth provider who can belong to many
organizations.
"""

from datetime import datetime
from typing import Optional

from tenantkit.domain.base import DomainModel


class User(DomainModel):
    """
    User entity - identity record linked to the auth provider.

    Business Rules:
    - external_id is the auth provider's subject and is unique
    - username is how end users find each other (email, nickname, ...)
    - Soft delete only: deleted_at marks deletion, rows are never purged
    """

    id: str
    external_id: str
    username: str

    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
