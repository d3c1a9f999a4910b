from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Mapping, Optional

from tenantkit.domain.auth import Principal


class ClockPort(ABC):
    """Clock abstraction - application layer"""

    @abstractmethod
    def now(self) -> datetime:
        pass


class UuidPort(ABC):
    """Identifier generator abstraction - application layer"""

    @abstractmethod
    def generate(self) -> str:
        pass


class MetricsPort(ABC):
    """Optional counters/timings sink. Absence never affects correctness."""

    @abstractmethod
    def increment(self, name: str, tags: Optional[Mapping[str, str]] = None) -> None:
        pass

    @abstractmethod
    def timing(self, name: str, milliseconds: float, tags: Optional[Mapping[str, str]] = None) -> None:
        pass


class AuthService(ABC):
    """Turns adapter-defined credentials into a Principal"""

    @abstractmethod
    async def authenticate(self, auth_input: Any) -> Principal:
        """
        Authenticate a request.

        Returns:
            The caller's Principal, or ANONYMOUS_PRINCIPAL when credentials are
            missing or invalid. Never raises for bad credentials.
        """
        pass
