import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Mapping, TypeVar

from tenantkit.app.repositories.membership_repository import IOrganizationMembershipRepository
from tenantkit.app.repositories.organization_repository import IOrganizationRepository
from tenantkit.app.repositories.user_repository import IUserRepository
from tenantkit.domain.errors import PersistenceError, RollbackError, TransactionError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RepositoryBundle:
    """
    Repositories taking part in one transaction, looked up by name.

    The bundle is open-ended: adapters may register any set of repositories.
    The three core ones are declared for readability.
    """

    users: IUserRepository
    organizations: IOrganizationRepository
    organization_memberships: IOrganizationMembershipRepository

    def __init__(self, repositories: Mapping[str, Any]):
        self.__dict__["_repositories"] = dict(repositories)

    def __getattr__(self, name: str) -> Any:
        try:
            return self.__dict__["_repositories"][name]
        except KeyError:
            raise AttributeError(f"No repository named '{name}' in this bundle") from None

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("RepositoryBundle is read-only")


Work = Callable[[RepositoryBundle], Awaitable[T]]


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    _in_transaction = False

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass

    @abstractmethod
    def repositories(self) -> RepositoryBundle:
        """Bundle bound to the open scope (valid only inside __aenter__/__aexit__)"""
        pass

    async def transaction(self, work: Work[T]) -> T:
        """
        Run work atomically.

        Commits implicitly when work returns. If work raises, every mutation made
        through the bundle is undone and the original error is re-raised
        unchanged. A failing rollback raises RollbackError chained to the
        rollback failure, with the original error kept on `.original`.

        Raises:
            TransactionError: called while a transaction is already open
        """
        if self._in_transaction:
            raise TransactionError("Nested transactions are not supported")

        self._in_transaction = True
        try:
            async with self:
                repos = self.repositories()
                try:
                    result = await work(repos)
                except BaseException as exc:
                    await self._rollback_after(exc)
                    raise

                try:
                    await self.commit()
                except PersistenceError as exc:
                    await self._rollback_after(exc)
                    raise
                except Exception as exc:
                    await self._rollback_after(exc)
                    raise PersistenceError("Commit failed") from exc
                return result
        finally:
            self._in_transaction = False

    async def _rollback_after(self, original: BaseException) -> None:
        try:
            await self.rollback()
        except Exception as rollback_exc:
            logger.error(
                "Rollback failed after %s: %s", type(original).__name__, rollback_exc
            )
            raise RollbackError(original) from rollback_exc


UnitOfWorkFactory = Callable[[], UnitOfWork]

