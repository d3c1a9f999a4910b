"""
Error Mapper

Total function from any exception to a transport-neutral error descriptor.
Unknown error types fall through to a generic 500 and never leak their
message or internals.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Type

from tenantkit.domain.errors import (
    AbortedError,
    ConflictError,
    DomainError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)

INTERNAL_ERROR_CODE = "INTERNAL_ERROR"
INTERNAL_ERROR_MESSAGE = "Internal server error"


@dataclass(frozen=True)
class ErrorDescriptor:
    status: int
    code: str
    message: str
    request_id: Optional[str] = None
    details: Optional[Dict[str, Any]] = None

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status < 500

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            body["details"] = self.details
        body["request_id"] = self.request_id
        return body


DEFAULT_STATUS_TABLE: Mapping[Type[BaseException], int] = {
    ValidationError: 400,
    ForbiddenError: 403,
    NotFoundError: 404,
    ConflictError: 409,
    AbortedError: 422,
}


@dataclass
class ErrorMapper:
    """Static error table, looked up along the error's MRO"""

    table: Mapping[Type[BaseException], int] = field(
        default_factory=lambda: dict(DEFAULT_STATUS_TABLE)
    )

    def status_for(self, error: BaseException) -> int:
        for klass in type(error).__mro__:
            status = self.table.get(klass)
            if status is not None:
                return status
        return 500

    def to_descriptor(self, error: BaseException, request_id: Optional[str] = None) -> ErrorDescriptor:
        status = self.status_for(error)
        if status >= 500 or not isinstance(error, DomainError):
            return ErrorDescriptor(
                status=500,
                code=INTERNAL_ERROR_CODE,
                message=INTERNAL_ERROR_MESSAGE,
                request_id=request_id,
            )

        details: Optional[Dict[str, Any]] = None
        if isinstance(error, ValidationError):
            details = {"issues": [issue.to_dict() for issue in error.issues]}
        return ErrorDescriptor(
            status=status,
            code=error.code,
            message=error.message,
            request_id=request_id,
            details=details,
        )
