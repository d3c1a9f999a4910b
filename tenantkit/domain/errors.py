"""
Domain Errors

Closed taxonomy of errors raised by use cases, repositories and the schema
merge engine. Transport adapters only ever see these types.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class FieldIssue:
    """One failing field of a validated payload"""

    path: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"path": self.path, "message": self.message}


class DomainError(Exception):
    code = "DOMAIN_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(DomainError):
    code = "VALIDATION_ERROR"

    def __init__(self, issues: List[FieldIssue], message: str = "Invalid input"):
        self.issues = list(issues)
        super().__init__(message, {"issues": [issue.to_dict() for issue in self.issues]})

    @classmethod
    def single(cls, path: str, message: str) -> "ValidationError":
        return cls([FieldIssue(path, message)], message)


class NotFoundError(DomainError):
    code = "NOT_FOUND"

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(
            f"{resource} with identifier '{identifier}' not found",
            {"resource": resource, "identifier": identifier},
        )


class ForbiddenError(DomainError):
    code = "FORBIDDEN"

    def __init__(self, message: str = "Not allowed to perform this operation"):
        super().__init__(message)


class ConflictError(DomainError):
    code = "CONFLICT"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class PersistenceError(DomainError):
    """Adapter failure. The adapter's own exception is kept as __cause__."""

    code = "PERSISTENCE_ERROR"

    def __init__(self, message: str = "Persistence operation failed"):
        super().__init__(message)


class TransactionError(PersistenceError):
    code = "TRANSACTION_ERROR"


class RollbackError(PersistenceError):
    """Rollback itself failed. `original` is the error that triggered it."""

    code = "ROLLBACK_FAILED"

    def __init__(self, original: BaseException):
        self.original = original
        super().__init__(f"Rollback failed after {type(original).__name__}")


class SchemaConflictError(DomainError):
    """Raised at configuration time only"""

    code = "SCHEMA_CONFLICT"

    def __init__(self, message: str, fields: Optional[List[str]] = None):
        self.fields = list(fields or [])
        super().__init__(message, {"fields": self.fields})


class AbortedError(DomainError):
    code = "ABORTED"

    def __init__(self, reason: str = "aborted"):
        self.reason = reason
        super().__init__(f"Use case execution aborted: {reason}", {"reason": reason})
