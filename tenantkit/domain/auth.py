"""
Principal and OperationContext

The authenticated actor of a request and the per-request metadata threaded
through repository calls for audit correlation.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from tenantkit.domain.base import generate_uuid


@dataclass(frozen=True)
class Principal:
    """
    Authenticated actor.

    external_id is the auth provider's subject. The "no credentials" state is
    ANONYMOUS_PRINCIPAL, never None.
    """

    external_id: str
    user_id: Optional[str] = None

    @property
    def is_anonymous(self) -> bool:
        return not self.external_id


ANONYMOUS_PRINCIPAL = Principal(external_id="")


def create_principal(external_id: str, user_id: Optional[str] = None) -> Principal:
    return Principal(external_id=external_id, user_id=user_id)


@dataclass(frozen=True)
class OperationContext:
    """
    Transient per-request metadata. Never persisted directly.

    organization_id and audit_action are filled in by use cases through
    with_audit() before repository calls.
    """

    request_id: str = field(default_factory=generate_uuid)
    actor: Principal = ANONYMOUS_PRINCIPAL
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    organization_id: Optional[str] = None
    audit_action: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def with_audit(
        self, action: str, organization_id: Optional[str] = None, **metadata: Any
    ) -> "OperationContext":
        return replace(
            self,
            audit_action=action,
            organization_id=organization_id or self.organization_id,
            metadata={**self.metadata, **metadata},
        )
